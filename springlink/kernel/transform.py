# springlink/kernel/transform.py
"""
GEOMETRY & TRANSFORMATIONS: Global -> Local -> Basic
====================================================

PURPOSE:
--------
The spring stiffness is given in the BASIC system: one entry per declared
direction, nothing else. The analysis engine works in the GLOBAL system.
Between the two sits the LOCAL system, aligned with the element axes.

    ul = Tgl @ ug        (global -> local, a rotation per node)
    ub = Tlb @ ul        (local -> basic, a selection/projection)

and the usual congruent transformations bring stiffness and forces back:

    K_global = Tgl.T @ (Tlb.T @ kb @ Tlb) @ Tgl
    p_global = Tgl.T @ (Tlb.T @ qb)

ORIENTATION:
------------
The local triad is built from two vectors:

    x : explicit local x, else node i -> node j, else global X
    y : explicit local y (made orthogonal to x), else a default

    z = x × y,  y = z × x   (then normalized)

Each row of the 3×3 orientation matrix is one unit local axis expressed in
global components, so `trans @ v_global = v_local`.

For elements with rotational DOFs, a transverse (shear) deformation is
measured at mid-length, which couples it with the end rotations by ±L/2.
"""

import logging
import numpy as np
import scipy.linalg
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config import CONFIG
from ..errors import GeometryError
from .dof import DOFLayout, DOFManager

_logger = logging.getLogger(__name__)

GLOBAL_X = np.array([1.0, 0.0, 0.0])
GLOBAL_Y = np.array([0.0, 1.0, 0.0])
GLOBAL_Z = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True, eq=False)
class Transformations:
    """Derived geometry of a bound element."""
    length: float
    trans: np.ndarray   # 3x3 orientation, rows = local x, y, z
    Tgl: np.ndarray     # numDOF x numDOF
    Tlb: np.ndarray     # numDIR x numDOF

    @property
    def Tgb(self) -> np.ndarray:
        """Combined global -> basic transformation."""
        return self.Tlb @ self.Tgl


def _as_vector3(v: Sequence[float]) -> np.ndarray:
    out = np.zeros(3, dtype=float)
    arr = np.asarray(v, dtype=float).ravel()
    out[:arr.size] = arr[:3]
    return out


def element_length(coords_i: Sequence[float], coords_j: Sequence[float]) -> Tuple[float, np.ndarray]:
    """
    Length and node i -> node j vector (padded to 3 components).
    """
    xp = _as_vector3(coords_j) - _as_vector3(coords_i)
    L = float(np.sqrt(xp @ xp))
    return L, xp


def default_y(layout: DOFLayout, x: np.ndarray) -> np.ndarray:
    """
    Default local y when none is supplied.

    1D/2D: in-plane perpendicular (global Z cross x).
    3D: global Y, or -global X when x is parallel to global Y.
    """
    if layout.ndm < 3:
        return np.cross(GLOBAL_Z, x)
    xn = x / np.linalg.norm(x)
    if np.linalg.norm(np.cross(xn, GLOBAL_Y)) < CONFIG.orientation_tolerance:
        return -GLOBAL_X
    return GLOBAL_Y.copy()


def orientation_matrix(
    layout: DOFLayout,
    xp: np.ndarray,
    L: float,
    x: Optional[Sequence[float]] = None,
    y: Optional[Sequence[float]] = None,
    tag: int = 0,
) -> np.ndarray:
    """
    Build the 3×3 orientation matrix of the element.

    Parameters:
    -----------
    layout : DOFLayout
        Classified layout of the element
    xp : np.ndarray
        Node i -> node j vector (3 components)
    L : float
        Element length
    x, y : sequence of 3 floats or None
        User orientation vectors
    tag : int
        Element tag, only used in messages

    Returns:
    --------
    np.ndarray
        3×3 matrix whose rows are the unit local x, y, z axes

    Raises:
    -------
    GeometryError
        If nodes are coincident and no x is given (2D/3D), or if the
        supplied/default vectors give a degenerate triad
    """
    if x is not None:
        xv = _as_vector3(x)
        if L > CONFIG.length_tolerance:
            _logger.info(
                "Element %d: ignoring nodes and using specified local x vector "
                "to determine orientation", tag
            )
    elif layout.ndm == 1:
        xv = GLOBAL_X.copy()
    elif L > CONFIG.length_tolerance:
        xv = xp.copy()
    else:
        raise GeometryError(
            f"Element {tag} has coincident nodes; a local x vector is required "
            f"to orient a {layout.ndm}D element"
        )

    if np.linalg.norm(xv) < CONFIG.orientation_tolerance:
        raise GeometryError(f"Element {tag}: local x vector has zero length")

    yv = _as_vector3(y) if y is not None else default_y(layout, xv)

    z = np.cross(xv, yv)
    yv = np.cross(z, xv)

    xn = np.linalg.norm(xv)
    yn = np.linalg.norm(yv)
    zn = np.linalg.norm(z)
    if min(xn, yn, zn) < CONFIG.orientation_tolerance:
        raise GeometryError(
            f"Element {tag}: invalid orientation vectors, x and y are parallel "
            f"or of zero length (x={xv.tolist()}, y={yv.tolist()})"
        )

    trans = np.zeros((3, 3), dtype=float)
    trans[0, :] = xv / xn
    trans[1, :] = yv / yn
    trans[2, :] = z / zn
    return trans


def global_to_local(layout: DOFLayout, trans: np.ndarray) -> np.ndarray:
    """
    Block-diagonal rotation, one identical block per node.

    Node block = translational part trans[:ndm, :ndm], followed by the
    rotational part (trans[2, 2] in 2D, the full trans in 3D).
    """
    ndm = layout.ndm
    blocks = [trans[:ndm, :ndm]]
    if layout.num_rotations == 1:
        blocks.append(trans[2:3, 2:3])
    elif layout.num_rotations == 3:
        blocks.append(trans)
    node_block = scipy.linalg.block_diag(*blocks)
    return scipy.linalg.block_diag(node_block, node_block)


def local_to_basic(layout: DOFLayout, directions: Sequence[int], L: float) -> np.ndarray:
    """
    Selection matrix from local DOFs to the declared basic directions.

    Each basic deformation is (node j) - (node i) along its direction. In
    layouts with rotations, transverse deformation is taken at mid-length:

        direction 1: -L/2 at both rz
        direction 2 (3D): +L/2 at both ry
    """
    dof = DOFManager(layout.dof_per_node)
    Tlb = np.zeros((len(directions), layout.num_dof), dtype=float)

    for i, d in enumerate(directions):
        Tlb[i, dof.idx(0, d)] = -1.0
        Tlb[i, dof.idx(1, d)] = 1.0

        if d == 1 and d < layout.ndm:
            rz = layout.rotation_dof(2)
            if rz is not None:
                Tlb[i, dof.idx(0, rz)] = -0.5 * L
                Tlb[i, dof.idx(1, rz)] = -0.5 * L
        elif d == 2 and d < layout.ndm:
            ry = layout.rotation_dof(1)
            if ry is not None:
                Tlb[i, dof.idx(0, ry)] = 0.5 * L
                Tlb[i, dof.idx(1, ry)] = 0.5 * L

    return Tlb


def build_transformations(
    layout: DOFLayout,
    directions: Sequence[int],
    coords_i: Sequence[float],
    coords_j: Sequence[float],
    x: Optional[Sequence[float]] = None,
    y: Optional[Sequence[float]] = None,
    tag: int = 0,
) -> Transformations:
    """Run the full geometry pass for a pair of node positions."""
    L, xp = element_length(coords_i, coords_j)
    trans = orientation_matrix(layout, xp, L, x, y, tag)
    return Transformations(
        length=L,
        trans=trans,
        Tgl=global_to_local(layout, trans),
        Tlb=local_to_basic(layout, directions, L),
    )

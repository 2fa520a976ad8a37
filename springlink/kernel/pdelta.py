# springlink/kernel/pdelta.py
"""
P-Delta correction: moment redistribution driven by moment-ratio weights.

An axial force N acting through a relative transverse displacement Δ
produces a second-order moment M = N·Δ. Per bending plane, with the
transverse direction among the basic directions:

- the ends take r_i·M and r_j·M as end moments when the rotational
  direction of the plane is also a basic direction,
- the remainder (1 - r_i - r_j)·M is applied without redistribution, as an
  end shear couple V = (1 - r_i - r_j)·M / L.

Moment ratios are ordered [rMy1, rMy2, rMz1, rMz2]:
    plane "y": transverse local y, moment about local z, weights rMz1, rMz2
    plane "z": transverse local z, moment about local y, weights rMy1, rMy2

An all-zero ratio vector disables the correction.
"""

import warnings
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config import CONFIG
from ..errors import ConfigurationError, ConfigurationWarning
from .dof import DOFLayout, DOFManager


@dataclass(frozen=True)
class BendingPlane:
    name: str
    transverse: int               # local translational dof at a node
    rotation_axis: int            # local axis the end moment acts about
    ratios: Tuple[int, int]       # indices into the moment-ratio vector
    sign: float                   # right-hand rule sign of the end moment


PLANES = (
    BendingPlane("y", transverse=1, rotation_axis=2, ratios=(2, 3), sign=1.0),
    BendingPlane("z", transverse=2, rotation_axis=1, ratios=(0, 1), sign=-1.0),
)


def check_moment_ratios(mratio: Optional[Sequence[float]], warn: bool = True) -> Optional[np.ndarray]:
    """
    Validate the moment-ratio vector.

    Returns None when absent or all zero. Raises ConfigurationError on wrong
    size, negative or non-finite entries, or a plane sum above 1. With
    `warn`, a plane sum strictly between 0 and 1 emits ConfigurationWarning
    (the remainder is carried as end shear).
    """
    if mratio is None:
        return None
    r = np.asarray(mratio, dtype=float).ravel()
    if r.size != 4:
        raise ConfigurationError(
            f"Moment ratios must have 4 entries [rMy1, rMy2, rMz1, rMz2], got {r.size}"
        )
    if not np.all(np.isfinite(r)) or np.any(r < 0.0):
        raise ConfigurationError(f"Moment ratios must be finite and non-negative, got {r.tolist()}")

    for label, (a, b) in (("rMy1 + rMy2", (0, 1)), ("rMz1 + rMz2", (2, 3))):
        total = r[a] + r[b]
        if total > 1.0:
            raise ConfigurationError(f"Incorrect p-delta moment ratios: {label} = {total} > 1.0")
        if warn and 0.0 < total < 1.0:
            warnings.warn(
                f"P-delta moment ratios {label} = {total} < 1.0; the remaining "
                f"{1.0 - total:.3g} of the second-order moment is applied as end shear",
                ConfigurationWarning,
                stacklevel=3,
            )
    if not np.any(r):
        return None
    return r


def axial_force(directions: Sequence[int], qb: np.ndarray) -> float:
    """Basic force along direction 0, or 0.0 if the spring has no axial direction."""
    for i, d in enumerate(directions):
        if d == 0:
            return float(qb[i])
    return 0.0


def _active_planes(layout: DOFLayout, directions: Sequence[int], mratio: np.ndarray):
    """Planes whose transverse direction is a basic direction."""
    for plane in PLANES:
        if plane.transverse >= layout.ndm or plane.transverse not in directions:
            continue
        ri = mratio[plane.ratios[0]]
        rj = mratio[plane.ratios[1]]
        rot = layout.rotation_dof(plane.rotation_axis)
        if rot is not None and rot not in directions:
            rot = None
        yield plane, ri, rj, rot


def pdelta_forces(
    layout: DOFLayout,
    directions: Sequence[int],
    mratio: np.ndarray,
    qb: np.ndarray,
    ul: np.ndarray,
    L: float,
) -> np.ndarray:
    """
    Local-system force correction (length numDOF).

    Args:
        layout: Element layout
        directions: Basic direction codes
        mratio: Validated moment ratios
        qb: Basic forces
        ul: Local displacements
        L: Element length

    Returns:
        Correction to add to Tlb.T @ qb
    """
    p = np.zeros(layout.num_dof, dtype=float)
    N = axial_force(directions, qb)
    if N == 0.0:
        return p

    dof = DOFManager(layout.dof_per_node)
    for plane, ri, rj, rot in _active_planes(layout, directions, mratio):
        ti = dof.idx(0, plane.transverse)
        tj = dof.idx(1, plane.transverse)
        M = N * (ul[tj] - ul[ti])

        if rot is not None:
            p[dof.idx(0, rot)] += plane.sign * ri * M
            p[dof.idx(1, rot)] += plane.sign * rj * M
        share = 1.0 - ri - rj
        if share > 0.0 and L > CONFIG.length_tolerance:
            V = share * M / L
            p[ti] -= V
            p[tj] += V

    return p


def pdelta_stiffness(
    layout: DOFLayout,
    directions: Sequence[int],
    mratio: np.ndarray,
    qb: np.ndarray,
    L: float,
) -> np.ndarray:
    """
    Local-system stiffness correction (numDOF x numDOF), the derivative of
    pdelta_forces with respect to the local displacements at fixed N.
    """
    n = layout.num_dof
    kg = np.zeros((n, n), dtype=float)
    N = axial_force(directions, qb)
    if N == 0.0:
        return kg

    dof = DOFManager(layout.dof_per_node)
    for plane, ri, rj, rot in _active_planes(layout, directions, mratio):
        ti = dof.idx(0, plane.transverse)
        tj = dof.idx(1, plane.transverse)

        if rot is not None:
            for slot, r in ((0, ri), (1, rj)):
                row = dof.idx(slot, rot)
                kg[row, ti] -= plane.sign * r * N
                kg[row, tj] += plane.sign * r * N
        share = 1.0 - ri - rj
        if share > 0.0 and L > CONFIG.length_tolerance:
            c = share * N / L
            kg[ti, ti] += c
            kg[ti, tj] -= c
            kg[tj, ti] -= c
            kg[tj, tj] += c

    return kg

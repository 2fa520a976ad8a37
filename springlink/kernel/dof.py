# springlink/kernel/dof.py
"""
DIRECTION CLASSIFIER: Element DOF Layouts and Indexing
======================================================

PURPOSE:
--------
A two-node spring can live in several kinds of models. What changes between
them is only the number of DOFs each node carries:

    D1N2:   1D, 1 DOF/node  (ux)
    D2N4:   2D, 2 DOF/node  (ux, uy)
    D2N6:   2D, 3 DOF/node  (ux, uy, rz)
    D3N6:   3D, 3 DOF/node  (ux, uy, uz)
    D3N12:  3D, 6 DOF/node  (ux, uy, uz, rx, ry, rz)

The layout is resolved ONCE (when the element learns its dimension and the
nodal DOF count) and every later method asks the layout instead of switching
on dimension again.

Direction codes are local DOF indices at a single node. A spring acting in
direction 0 resists axial deformation, 1 and 2 transverse shear, 3..5
torsion and bending rotations (3D only).

USAGE:
------
    layout = classify(ndm=2, num_dof=6)           # -> DOFLayout.D2N6
    check_directions(layout, [0, 1, 2])           # raises ConfigurationError if bad

    dof = DOFManager(dof_per_node=layout.dof_per_node)
    dof.idx(1, 0)                                 # -> 3 (node j, ux)
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import ConfigurationError


class DOFLayout(Enum):
    """Supported element layouts, tagged by (dimension, element DOF count)."""
    D1N2 = (1, 2)
    D2N4 = (2, 4)
    D2N6 = (2, 6)
    D3N6 = (3, 6)
    D3N12 = (3, 12)

    @property
    def ndm(self) -> int:
        return self.value[0]

    @property
    def num_dof(self) -> int:
        return self.value[1]

    @property
    def dof_per_node(self) -> int:
        return self.value[1] // 2

    @property
    def max_direction(self) -> int:
        return self.dof_per_node - 1

    @property
    def num_rotations(self) -> int:
        """Rotational DOFs per node (0, 1 or 3)."""
        return self.dof_per_node - self.ndm

    def rotation_dof(self, axis: int) -> Optional[int]:
        """
        Local DOF index (at one node) of the rotation about global-like
        local axis `axis` (0=x, 1=y, 2=z), or None if the layout has none.
        """
        if self.num_rotations == 1:
            # planar layouts only rotate about z
            return self.ndm if axis == 2 else None
        if self.num_rotations == 3:
            return self.ndm + axis
        return None


# Lookup used by classify(); every other combination is unsupported
LAYOUTS = {layout.value: layout for layout in DOFLayout}


def classify(ndm: int, num_dof: int) -> DOFLayout:
    """
    Select the DOF layout for a spatial dimension and element DOF count.

    Parameters:
    -----------
    ndm : int
        Spatial dimension of the element (1, 2 or 3)
    num_dof : int
        Total DOFs of the element (both nodes together)

    Returns:
    --------
    DOFLayout

    Raises:
    -------
    ConfigurationError
        If the combination is not one of the supported layouts
    """
    try:
        return LAYOUTS[(int(ndm), int(num_dof))]
    except KeyError:
        supported = ", ".join(f"{d}D/{n}" for d, n in LAYOUTS)
        raise ConfigurationError(
            f"Unsupported layout: dimension {ndm} with {num_dof} element DOFs "
            f"(supported: {supported})"
        ) from None


def layout_for_nodes(ndm: int, dof_per_node: int) -> DOFLayout:
    """Classify from the DOF count carried by each node."""
    return classify(ndm, 2 * dof_per_node)


def check_directions(layout: DOFLayout, directions: Sequence[int]) -> List[int]:
    """
    Validate direction codes against a layout.

    Codes must be unique and lie in [0, layout.max_direction].
    Returns the codes as a list of plain ints.
    """
    dirs = [int(d) for d in directions]
    if not dirs:
        raise ConfigurationError("At least one direction is required")
    if len(set(dirs)) != len(dirs):
        raise ConfigurationError(f"Direction codes must be unique, got {dirs}")
    for d in dirs:
        if d < 0 or d > layout.max_direction:
            raise ConfigurationError(
                f"Direction {d} out of range [0, {layout.max_direction}] "
                f"for layout {layout.name}"
            )
    return dirs


@dataclass
class DOFManager:
    """
    Maps (node slot, local dof) to positions in element vectors.

    Slot 0 is node i, slot 1 is node j. Element vectors are ordered
    [node i dofs..., node j dofs...].

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=3)
    >>> dof.idx(1, 0)
    3
    >>> dof.node_dofs(1)
    [3, 4, 5]
    """
    dof_per_node: int

    def idx(self, node_slot: int, local_dof: int) -> int:
        return self.dof_per_node * node_slot + local_dof

    def node_dofs(self, node_slot: int) -> List[int]:
        """All element-vector indices of one node."""
        base = self.dof_per_node * node_slot
        return list(range(base, base + self.dof_per_node))

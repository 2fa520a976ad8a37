# springlink/model.py
"""
NODES AND NODE REGISTRY
=======================

The element never owns its nodes. It stores two node ids and resolves them
through a registry: once at bind time for the coordinates, and again on every
update for the trial response.

`Domain` is the smallest registry that satisfies that contract. An analysis
engine may pass any object with the same methods.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Node:
    """
    A node with fixed reference coordinates.

    Parameters:
    -----------
    id : int
        Unique node identifier
    coords : tuple of float
        Reference position; its length is the spatial dimension (1, 2 or 3)
    ndf : int
        Number of DOFs carried by the node

    Examples:
    ---------
    >>> Node(1, (0.0, 0.0), ndf=2)
    >>> Node(2, (3.0, 0.0, 1.5), ndf=6)
    """
    id: int
    coords: Tuple[float, ...]
    ndf: int

    @property
    def ndm(self) -> int:
        return len(self.coords)


class Domain:
    """In-memory node registry holding reference geometry and trial response."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._disp: Dict[int, np.ndarray] = {}
        self._vel: Dict[int, np.ndarray] = {}

    def add_node(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise ValueError(f"Node {node.id} already exists")
        self._nodes[node.id] = node
        self._disp[node.id] = np.zeros(node.ndf, dtype=float)
        self._vel[node.id] = np.zeros(node.ndf, dtype=float)
        return node

    def remove_node(self, node_id: int) -> Node:
        self._disp.pop(node_id, None)
        self._vel.pop(node_id, None)
        return self._nodes.pop(node_id)

    def get_node(self, node_id: int) -> Node:
        """Raises KeyError when the id does not resolve."""
        return self._nodes[node_id]

    def set_trial_response(
        self,
        node_id: int,
        disp: Sequence[float],
        vel: Optional[Sequence[float]] = None,
    ) -> None:
        """Push a trial displacement (and optionally velocity) for a node."""
        node = self._nodes[node_id]
        d = np.asarray(disp, dtype=float).ravel()
        if d.size != node.ndf:
            raise ValueError(f"Node {node_id} expects {node.ndf} displacement components, got {d.size}")
        self._disp[node_id] = d.copy()
        if vel is not None:
            v = np.asarray(vel, dtype=float).ravel()
            if v.size != node.ndf:
                raise ValueError(f"Node {node_id} expects {node.ndf} velocity components, got {v.size}")
            self._vel[node_id] = v.copy()

    def trial_disp(self, node_id: int) -> np.ndarray:
        return self._disp[node_id]

    def trial_vel(self, node_id: int) -> np.ndarray:
        return self._vel[node_id]

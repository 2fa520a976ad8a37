# springlink/state.py
"""Trial and committed response snapshots of a spring element."""

import numpy as np
from dataclasses import dataclass
from enum import Enum


class StatePhase(Enum):
    INITIAL = "initial"       # both snapshots zero
    TRIAL = "trial"           # displacement pushed, not yet accepted
    COMMITTED = "committed"   # last accepted step


@dataclass
class SpringState:
    """
    One snapshot of the element response.

    Attributes:
        ub: Basic displacements (numDIR,)
        ubdot: Basic velocities (numDIR,)
        qb: Basic forces (numDIR,)
        ul: Local displacements (numDOF,)
    """
    ub: np.ndarray
    ubdot: np.ndarray
    qb: np.ndarray
    ul: np.ndarray

    @classmethod
    def zeros(cls, num_dir: int, num_dof: int) -> "SpringState":
        return cls(
            ub=np.zeros(num_dir, dtype=float),
            ubdot=np.zeros(num_dir, dtype=float),
            qb=np.zeros(num_dir, dtype=float),
            ul=np.zeros(num_dof, dtype=float),
        )

    def copy(self) -> "SpringState":
        return SpringState(
            ub=self.ub.copy(),
            ubdot=self.ubdot.copy(),
            qb=self.qb.copy(),
            ul=self.ul.copy(),
        )

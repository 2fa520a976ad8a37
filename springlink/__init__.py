# springlink - Linear elastic two-node spring element
"""
SPRINGLINK: A Two-Node Spring Element Kernel
============================================

This package provides:
- A linear elastic spring joining two nodes in 1D/2D/3D models
- The global -> local -> basic transformation chain
- Optional P-Delta moment redistribution
- Trial/committed state bookkeeping for step-by-step analysis
- A versioned checkpoint record for restart and distribution

ARCHITECTURE:
-------------
    kernel/         Layouts, transformations, basic matrices, P-Delta (stateless)
    model.py        Node and the node registry (Domain)
    state.py        Trial/committed snapshots
    elements.py     SpringElement
    codec.py        pack / unpack
    errors.py       Error and warning types
    config.py       Tolerances and defaults
"""

from .errors import (
    SpringError,
    ConfigurationError,
    GeometryError,
    DecodeError,
    UnknownResponseError,
    ConfigurationWarning,
)
from .kernel import DOFLayout, classify
from .model import Node, Domain
from .state import SpringState, StatePhase
from .elements import SpringElement
from .codec import pack, unpack

__version__ = "0.1.0"

__all__ = [
    'SpringError', 'ConfigurationError', 'GeometryError', 'DecodeError',
    'UnknownResponseError', 'ConfigurationWarning',
    'DOFLayout', 'classify',
    'Node', 'Domain',
    'SpringState', 'StatePhase',
    'SpringElement',
    'pack', 'unpack',
]

# springlink/kernel - Dimension-agnostic spring mechanics
"""
KERNEL: LAYOUTS, TRANSFORMATIONS AND CORRECTIONS
================================================

Pure functions on numpy arrays. Nothing in here keeps state between calls,
so many elements can be evaluated side by side.

    dof.py          Direction classifier (DOFLayout) and element DOF indexing
    transform.py    Length, orientation triad, Tgl and Tlb
    basic.py        Symmetric basic stiffness/damping from an upper triangle
    pdelta.py       P-Delta force and stiffness corrections
"""

from .dof import DOFLayout, DOFManager, classify, layout_for_nodes, check_directions
from .transform import Transformations, build_transformations
from .basic import basic_stiffness, basic_damping
from .pdelta import check_moment_ratios, pdelta_forces, pdelta_stiffness

__all__ = [
    'DOFLayout', 'DOFManager', 'classify', 'layout_for_nodes', 'check_directions',
    'Transformations', 'build_transformations',
    'basic_stiffness', 'basic_damping',
    'check_moment_ratios', 'pdelta_forces', 'pdelta_stiffness',
]

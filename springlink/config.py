# springlink/config.py
"""
Kernel configuration and defaults.
"""

import sys
from dataclasses import dataclass


@dataclass
class SpringConfig:
    """Global kernel configuration."""

    # Geometry
    length_tolerance: float = sys.float_info.epsilon   # below this, nodes are coincident
    orientation_tolerance: float = 1e-12               # min norm of a triad vector

    # Wire format
    codec_version: int = 1

    # Rayleigh factors applied to new elements
    default_alpha_m: float = 0.0
    default_beta_k: float = 0.0
    default_beta_k0: float = 0.0
    default_beta_kc: float = 0.0


# Global config instance
CONFIG = SpringConfig()

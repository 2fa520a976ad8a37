# springlink/kernel/basic.py
"""Basic-system matrices: symmetric stiffness/damping from an upper triangle."""

import numpy as np
from typing import Optional

from ..errors import ConfigurationError


def symmetric_from_upper(matrix, size: int, name: str = "stiffness") -> np.ndarray:
    """
    Build a full symmetric matrix from the upper triangle of `matrix`.

    Entries below the diagonal are ignored, so callers may pass either a
    full matrix or one with only the upper half filled in.

    Args:
        matrix: Square array-like, shape (size, size)
        size: Number of basic directions
        name: Label used in error messages

    Returns:
        Symmetric (size x size) float array

    Raises:
        ConfigurationError: If the shape does not match or values are not finite
    """
    m = np.array(matrix, dtype=float)
    if m.size == 1 and size == 1:
        m = m.reshape(1, 1)
    if m.shape != (size, size):
        raise ConfigurationError(
            f"{name} matrix must be {size}x{size} to match the number of directions, "
            f"got shape {m.shape}"
        )
    if not np.all(np.isfinite(m)):
        raise ConfigurationError(f"{name} matrix contains non-finite values")

    upper = np.triu(m)
    return upper + np.triu(m, k=1).T


def basic_stiffness(stiffness, num_dir: int) -> np.ndarray:
    return symmetric_from_upper(stiffness, num_dir, "stiffness")


def basic_damping(damping, num_dir: int) -> Optional[np.ndarray]:
    """Damping is optional: None stays None."""
    if damping is None:
        return None
    return symmetric_from_upper(damping, num_dir, "damping")

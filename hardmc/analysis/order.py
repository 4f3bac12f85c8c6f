"""Orientational order analysis."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def ordering_tensor(orientations: ArrayLike) -> NDArray[np.floating]:
    """
    Compute the ordering tensor Q = (3 <e e> - I) / 2.

    Q is traceless and symmetric, and unchanged by e -> -e for any molecule,
    which reflects the head/tail symmetry of linear molecules.

    Args:
        orientations: Unit axis vectors, shape (N, 3).

    Returns:
        Ordering tensor, shape (3, 3).
    """
    e = np.asarray(orientations, dtype=np.float64)
    if e.ndim != 2 or e.shape[1] != 3:
        raise ValueError(f"orientations must have shape (N, 3), got {e.shape}")
    if len(e) == 0:
        raise ValueError("at least one orientation is required")

    q = 1.5 * (e.T @ e) / len(e)
    q -= 0.5 * np.eye(3)
    return q


def nematic_order(orientations: ArrayLike) -> float:
    """
    Nematic order parameter: the largest eigenvalue of the ordering tensor.

    0 for an isotropic distribution (up to finite-size effects) and 1 when
    every axis is parallel to a common director.
    """
    return float(np.linalg.eigvalsh(ordering_tensor(orientations))[-1])

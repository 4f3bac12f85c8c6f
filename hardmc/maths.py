"""Random vector generation and acceptance tests for Monte Carlo moves."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Metropolis exponents above this are rejected without calling exp()
EXPONENT_GUARD = 75.0


def random_vector(rng: np.random.Generator) -> NDArray[np.floating]:
    """
    Draw a unit vector uniformly distributed on the sphere.

    Uses the Marsaglia method: pick a point in the unit disc by rejection,
    then map it to the sphere.
    """
    while True:
        zeta = 2.0 * rng.random(2) - 1.0
        zeta_sq = float(np.sum(zeta**2))
        if zeta_sq < 1.0:
            break
    f = 2.0 * np.sqrt(1.0 - zeta_sq)
    return np.array([zeta[0] * f, zeta[1] * f, 1.0 - 2.0 * zeta_sq])


def random_translate_vector(
    rng: np.random.Generator, dr_max: float, old: ArrayLike
) -> NDArray[np.floating]:
    """
    Displace a vector uniformly within a cube of half-width dr_max.

    Args:
        rng: Random number generator.
        dr_max: Maximum displacement along each axis.
        old: Vector to displace, shape (3,).

    Returns:
        Displaced vector, shape (3,).
    """
    old = np.asarray(old, dtype=np.float64)
    if old.shape != (3,):
        raise ValueError(f"Vector must have shape (3,), got {old.shape}")
    zeta = 2.0 * rng.random(3) - 1.0
    return old + zeta * dr_max


def random_rotate_vector(
    rng: np.random.Generator, angle_max: float, old: ArrayLike
) -> NDArray[np.floating]:
    """
    Rotate a unit vector by a random angle of at most angle_max.

    A random direction perpendicular to old is chosen, and old is rotated
    towards it by an angle drawn uniformly from (-angle_max, angle_max).

    Args:
        rng: Random number generator.
        angle_max: Maximum rotation angle in radians.
        old: Unit vector to rotate, shape (3,).

    Returns:
        Rotated unit vector, shape (3,).
    """
    old = np.asarray(old, dtype=np.float64)
    if old.shape != (3,):
        raise ValueError(f"Vector must have shape (3,), got {old.shape}")

    # Resample in the (measure-zero) event the direction is parallel to old
    while True:
        perp = random_vector(rng)
        perp = perp - np.dot(perp, old) * old
        perp_norm = np.linalg.norm(perp)
        if perp_norm > 1.0e-9:
            break
    perp = perp / perp_norm

    angle = (2.0 * rng.random() - 1.0) * angle_max
    e = old * np.cos(angle) + perp * np.sin(angle)
    return e / np.linalg.norm(e)


def metropolis(rng: np.random.Generator, delta: float) -> bool:
    """
    Metropolis test: accept with probability min(1, exp(-delta)).

    Args:
        rng: Random number generator.
        delta: Negative log of the acceptance weight ratio.

    Returns:
        True if the move is accepted.
    """
    if delta > EXPONENT_GUARD:
        return False
    if delta <= 0.0:
        return True
    return bool(rng.random() < np.exp(-delta))

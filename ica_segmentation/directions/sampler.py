"""
Direction Sampler

Enumerates unit vectors on integer-degree grids:

- Spherical mode: v(θ, φ) = [cosθ sinφ, sinθ sinφ, cosφ],
  θ ∈ {1°..360°}, φ ∈ {1°..180°}. θ varies fastest, so direction i has
  θ index i % n_theta and φ index i // n_theta.
- Circular mode: v(α) = cosα·v1 + sinα·v2, α ∈ {1°..360°}, for an
  orthonormal pair (v1, v2) spanning a plane.

The enumeration order is fixed; the search breaks ties on it.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

UNIT_NORM_TOL = 1e-9
"""Tolerance on ‖v‖ = 1 and on orthogonality checks."""


# ============================================================================
# Direction Set
# ============================================================================

@dataclass(frozen=True)
class DirectionSet:
    """
    Ordered, read-only collection of candidate directions.

    Attributes:
        vectors: Unit vectors, shape (M, 3)
        angles: Angles in degrees, shape (M, 2) as (θ, φ) for spherical mode,
                (M, 1) as (α,) for circular mode
        mode: 'spherical' or 'circular'
        grid_shape: (n_theta, n_phi) for spherical mode, (n_alpha,) for circular
    """
    vectors: np.ndarray
    angles: np.ndarray
    mode: str
    grid_shape: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.vectors)

    def __getitem__(self, index: int) -> np.ndarray:
        return self.vectors[index]

    def to_grid(self, values: np.ndarray) -> np.ndarray:
        """
        Reshape per-direction values to the angle grid.

        For spherical mode the grid has θ on rows and φ on columns, i.e.
        shape (n_theta, n_phi), which is the layout of the score surface.

        Args:
            values: One value per direction, shape (M,)

        Returns:
            grid: Values on the angle grid
        """
        values = np.asarray(values)
        if values.shape[0] != len(self):
            raise ValueError(
                f"Expected {len(self)} values, got {values.shape[0]}"
            )
        if self.mode == 'spherical':
            n_theta, n_phi = self.grid_shape
            # φ is the outer loop of the enumeration
            return values.reshape(n_phi, n_theta).T
        return values.reshape(self.grid_shape)


# ============================================================================
# Samplers
# ============================================================================

def _degree_range(stop: int, step: int) -> np.ndarray:
    """Integer degrees step, 2*step, ..., stop."""
    if step < 1 or stop % step != 0:
        raise ValueError(f"step must be a positive divisor of {stop}, got {step}")
    return np.arange(step, stop + 1, step, dtype=np.float64)


def _check_unit_norm(vectors: np.ndarray) -> None:
    norms = np.linalg.norm(vectors, axis=1)
    if not np.allclose(norms, 1.0, atol=UNIT_NORM_TOL):
        worst = float(np.max(np.abs(norms - 1.0)))
        raise ValueError(f"Sampled directions are not unit vectors (max deviation {worst:.3e})")


def spherical_directions(step_deg: int = 1) -> DirectionSet:
    """
    Full-sphere grid of directions.

    Args:
        step_deg: Degree step; 1 gives 360 x 180 = 64,800 directions

    Returns:
        directions: DirectionSet in spherical mode

    Example:
        >>> directions = spherical_directions()
        >>> len(directions)
        64800
        >>> directions.angles[1]  # θ moves first
        array([2., 1.])
    """
    thetas = _degree_range(360, step_deg)
    phis = _degree_range(180, step_deg)

    phi_grid, theta_grid = np.meshgrid(phis, thetas, indexing='ij')
    theta = np.deg2rad(theta_grid.ravel())
    phi = np.deg2rad(phi_grid.ravel())

    vectors = np.column_stack([
        np.cos(theta) * np.sin(phi),
        np.sin(theta) * np.sin(phi),
        np.cos(phi),
    ])
    _check_unit_norm(vectors)

    return DirectionSet(
        vectors=vectors,
        angles=np.column_stack([theta_grid.ravel(), phi_grid.ravel()]),
        mode='spherical',
        grid_shape=(len(thetas), len(phis)),
    )


def circular_directions(
    v1: np.ndarray,
    v2: np.ndarray,
    step_deg: int = 1,
    tol: Optional[float] = None
) -> DirectionSet:
    """
    Circle of directions in the plane spanned by an orthonormal pair.

    Args:
        v1: First basis vector of the plane, shape (3,)
        v2: Second basis vector, orthogonal to v1, shape (3,)
        step_deg: Degree step; 1 gives 360 directions
        tol: Tolerance for the orthonormality check (default UNIT_NORM_TOL)

    Returns:
        directions: DirectionSet in circular mode

    Raises:
        ValueError: If (v1, v2) is not orthonormal
    """
    tol = UNIT_NORM_TOL if tol is None else tol
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)

    if (abs(np.linalg.norm(v1) - 1.0) > tol
            or abs(np.linalg.norm(v2) - 1.0) > tol
            or abs(float(v1 @ v2)) > tol):
        raise ValueError("circular_directions requires an orthonormal pair (v1, v2)")

    alphas = _degree_range(360, step_deg)
    alpha = np.deg2rad(alphas)
    vectors = np.outer(np.cos(alpha), v1) + np.outer(np.sin(alpha), v2)
    _check_unit_norm(vectors)

    return DirectionSet(
        vectors=vectors,
        angles=alphas[:, np.newaxis],
        mode='circular',
        grid_shape=(len(alphas),),
    )

"""
Orthogonal Basis Builder

Completes IC1 to an orthonormal basis of R³:

1. Gram-Schmidt on a seeded random vector gives (v1, v2) spanning the plane
   orthogonal to IC1.
2. A circular search over that plane picks IC2.
3. IC3 = IC1 x IC2, normalized. No search.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from ..directions import UNIT_NORM_TOL, circular_directions
from ..search import BaseDirectionSearch, SearchResult

logger = logging.getLogger(__name__)

_PARALLEL_TOL = 1e-6


@dataclass(frozen=True)
class OrthonormalBasis:
    """
    Three mutually orthogonal unit vectors, in discovery order.
    """
    ic1: np.ndarray
    ic2: np.ndarray
    ic3: np.ndarray

    def as_matrix(self) -> np.ndarray:
        """Basis vectors as columns, shape (3, 3)."""
        return np.column_stack([self.ic1, self.ic2, self.ic3])

    def is_orthonormal(self, tol: float = 1e-8) -> bool:
        """True if Bᵗ B equals the identity within tol."""
        basis = self.as_matrix()
        return bool(np.allclose(basis.T @ basis, np.eye(3), atol=tol))


def _normalize(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def orthogonal_complement(
    axis: np.ndarray,
    rng: Union[np.random.Generator, int, None] = 42
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Orthonormal pair spanning the plane orthogonal to `axis`.

    Args:
        axis: Unit vector, shape (3,)
        rng: Generator (or seed) that draws the Gram-Schmidt seed vector

    Returns:
        (v1, v2): v1 = normalize(r - (r·axis) axis), v2 = axis x v1

    Raises:
        ValueError: If axis is not a unit vector
    """
    axis = np.asarray(axis, dtype=np.float64)
    if abs(np.linalg.norm(axis) - 1.0) > UNIT_NORM_TOL:
        raise ValueError(f"axis must be a unit vector, got norm {np.linalg.norm(axis)}")

    rng = np.random.default_rng(rng)
    while True:
        seed_vector = rng.standard_normal(3)
        residual = seed_vector - (seed_vector @ axis) * axis
        # redraw if the seed vector is (nearly) parallel to the axis
        if np.linalg.norm(residual) > _PARALLEL_TOL * np.linalg.norm(seed_vector):
            break

    v1 = _normalize(residual)
    v2 = np.cross(axis, v1)
    return v1, v2


class OrthogonalBasisBuilder:
    """
    Finds IC2 on the circle orthogonal to IC1 and derives IC3.

    Example:
        >>> builder = OrthogonalBasisBuilder(SequentialSearch(FisherScorer()))
        >>> basis, ic2_search = builder.build(whitened, ic1)
        >>> basis.is_orthonormal()
        True
    """

    def __init__(
        self,
        search: BaseDirectionSearch,
        step_deg: int = 1,
        random_seed: Optional[int] = 42
    ):
        self.search = search
        self.step_deg = step_deg
        self.random_seed = random_seed

    def build(self, whitened: np.ndarray, ic1: np.ndarray) -> Tuple[OrthonormalBasis, SearchResult]:
        """
        Complete IC1 to an orthonormal basis.

        Args:
            whitened: Whitened pixel matrix, shape (N, 3)
            ic1: First axis, unit vector of shape (3,)

        Returns:
            (basis, ic2_search): The basis and the circular search result for IC2
        """
        ic1 = np.asarray(ic1, dtype=np.float64)
        v1, v2 = orthogonal_complement(ic1, np.random.default_rng(self.random_seed))
        logger.debug("Plane orthogonal to IC1 spanned by %s and %s", v1, v2)

        circle = circular_directions(v1, v2, step_deg=self.step_deg)
        ic2_search = self.search.search(whitened, circle)
        ic2 = ic2_search.direction

        ic3 = _normalize(np.cross(ic1, ic2))

        basis = OrthonormalBasis(ic1=ic1, ic2=ic2, ic3=ic3)
        if not basis.is_orthonormal():
            # only reachable if ic1 is not a unit vector
            raise ValueError("Constructed basis is not orthonormal")
        return basis, ic2_search

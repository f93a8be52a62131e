"""
Separability Scorer

Projects whitened data onto a direction, splits the projection into two
clusters with k-means and scores the split with the Fisher Index:

    FI = (m1 - m2)² / (σ1² + σ2² + ε),    ε = 1e-10

Variances are sample variances (ddof=1). A projection that cannot be split
into two clusters of at least two points each scores 0.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..errors import DegenerateClusterWarning
from ..kmeans import KMeansConfig, SklearnKMeans

logger = logging.getLogger(__name__)

FISHER_EPSILON = 1e-10
"""Added to the pooled variance so two zero-variance clusters stay finite."""


def direction_seed(random_seed: Optional[int], index: int) -> Optional[int]:
    """
    Clustering seed of the direction at `index`.

    Derived from (random_seed, index) only, so a direction gets the same seed
    whichever worker evaluates it. None stays None (unseeded).
    """
    if random_seed is None:
        return None
    return int(np.random.SeedSequence([random_seed, index]).generate_state(1)[0])


def fisher_index(values: np.ndarray, labels: np.ndarray) -> float:
    """
    Fisher Index of a two-group labelling of 1D values.

    Args:
        values: Projected values, shape (N,)
        labels: Group of each value (0 or 1), shape (N,)

    Returns:
        score: (m1 - m2)² / (var1 + var2 + ε), or 0.0 when either group has
               fewer than two members
    """
    values = np.asarray(values, dtype=np.float64)
    group1 = values[labels == 0]
    group2 = values[labels == 1]

    if len(group1) < 2 or len(group2) < 2:
        return 0.0

    mean_diff = group1.mean() - group2.mean()
    pooled = group1.var(ddof=1) + group2.var(ddof=1)
    return float(mean_diff ** 2 / (pooled + FISHER_EPSILON))


@dataclass
class FisherScorer:
    """
    Scores directions by the Fisher Index of a 2-means split of the projection.

    Attributes:
        n_init: k-means restarts per direction (nstart)
        max_iter: k-means iteration cap (iter.max)
        random_seed: Base seed; per-direction seeds come from direction_seed()

    Example:
        >>> scorer = FisherScorer(n_init=5, max_iter=25, random_seed=42)
        >>> scorer.score(whitened, np.array([0.0, 0.0, 1.0]))
        3.71...
    """
    n_init: int = 5
    max_iter: int = 25
    random_seed: Optional[int] = 42

    def project(self, whitened: np.ndarray, direction: np.ndarray) -> np.ndarray:
        """Project whitened data (N, 3) onto a direction, giving shape (N,)."""
        return np.asarray(whitened, dtype=np.float64) @ np.asarray(direction, dtype=np.float64)

    def score(
        self,
        whitened: np.ndarray,
        direction: np.ndarray,
        index: int = 0
    ) -> float:
        """
        Fisher Index of one direction.

        Args:
            whitened: Whitened pixel matrix, shape (N, 3)
            direction: Unit vector, shape (3,)
            index: Position of the direction in its DirectionSet; selects the
                   clustering seed

        Returns:
            score: Non-negative Fisher Index (0.0 for degenerate projections)
        """
        return self.score_projection(self.project(whitened, direction), index)

    def score_projection(self, projection: np.ndarray, index: int = 0) -> float:
        """
        Fisher Index of an already projected vector.

        Emits a DegenerateClusterWarning when the projection cannot be split.

        Args:
            projection: 1D projected values, shape (N,)
            index: Seed selector, see score()

        Returns:
            score: Non-negative Fisher Index
        """
        score, reason = self.split_score(projection, index)
        if reason is not None:
            self._warn_degenerate(index, reason)
        return score

    def split_score(self, projection: np.ndarray, index: int = 0) -> Tuple[float, Optional[str]]:
        """
        Fisher Index of a projection, and why it is 0 when no split exists.

        Searches call this directly and report degenerate directions in bulk
        instead of warning once per direction.

        Returns:
            (score, reason): reason is None for a proper two-cluster split
        """
        if projection.shape[0] < 4 or np.ptp(projection) == 0.0:
            return 0.0, "projection is constant or too short"

        config = KMeansConfig(
            n_clusters=2,
            max_iter=self.max_iter,
            n_init=self.n_init,
            random_state=direction_seed(self.random_seed, index),
            init_method='random',
        )
        result = SklearnKMeans(config).fit_predict(projection)

        sizes = result.cluster_sizes()
        if sizes.min() < 2:
            return 0.0, f"cluster sizes {sizes.tolist()}"

        return fisher_index(projection, result.labels), None

    @staticmethod
    def _warn_degenerate(index: int, reason: str) -> None:
        logger.debug("Direction %d scored 0: %s", index, reason)
        warnings.warn(
            f"direction {index} could not be split into two clusters ({reason}); "
            f"scoring it 0",
            DegenerateClusterWarning,
            stacklevel=3,
        )

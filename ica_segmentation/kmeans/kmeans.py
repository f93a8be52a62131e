"""
K-Means Bipartitioning of Projections

Two-group k-means over 1D projected values, used as a black-box oracle by
the Fisher scorer and by the segmentation pass. Backed by sklearn.

Objective: minimize the within-group sum of squares
    J = Σ_k Σ_{x in group k} (x - c_k)²
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from sklearn.cluster import KMeans as SklearnKMeansAlgorithm


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class KMeansConfig:
    """
    Parameters of one clustering call.

    Field names follow sklearn; the R-style names used elsewhere map as
    nstart -> n_init and iter.max -> max_iter.
    """
    n_clusters: int = 2
    """Groups to form. The Fisher Index is defined for exactly 2."""

    max_iter: int = 25
    """Iteration cap of a single restart."""

    tol: float = 1e-4
    """Stop a restart once centers move less than this."""

    n_init: int = 5
    """Restarts from different random centers; the lowest-J run wins."""

    random_state: Optional[Union[int, np.random.RandomState]] = 42
    """Seed of the center initialization. None draws fresh entropy."""

    init_method: str = 'random'
    """'random' picks distinct samples as centers; 'k-means++' spreads them out."""

    def __post_init__(self):
        if self.n_clusters < 2:
            raise ValueError(f"n_clusters must be at least 2, got {self.n_clusters}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {self.max_iter}")
        if self.n_init < 1:
            raise ValueError(f"n_init must be at least 1, got {self.n_init}")
        if self.init_method not in ('random', 'k-means++'):
            raise ValueError(f"Unknown init_method {self.init_method!r}")


# ============================================================================
# Results
# ============================================================================

@dataclass
class KMeansResult:
    """
    Partition found by one clustering call.

    Attributes:
        labels: Group of every sample, shape (N,)
        centroids: Group centers, shape (n_clusters, n_features)
        inertia: Within-group sum of squares J of the kept run
        n_iter: Iterations used by the kept run
        converged: False if the kept run hit max_iter
    """
    labels: np.ndarray
    centroids: np.ndarray
    inertia: float
    n_iter: int
    converged: bool

    def cluster_sizes(self) -> np.ndarray:
        """Members per group, shape (n_clusters,)."""
        return np.bincount(self.labels, minlength=len(self.centroids))

    def reshape_labels(self, shape: Tuple[int, int]) -> np.ndarray:
        """Labels laid back out on an (H, W) pixel grid."""
        return self.labels.reshape(shape)


def as_feature_matrix(samples: np.ndarray) -> np.ndarray:
    """
    Column view of a projection: (N,) -> (N, 1). (N, d) input passes through.

    Raises:
        ValueError: For arrays with more than two dimensions
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim == 1:
        return samples[:, np.newaxis]
    if samples.ndim == 2:
        return samples
    raise ValueError(f"Expected a (N,) projection or (N, d) features, got {samples.shape}")


# ============================================================================
# Interface
# ============================================================================

class BaseKMeans(ABC):
    """
    Clusterer contract used by the scorer.

    Any variance-minimizing k-means will do; implementations take a 1D
    projection (or an (N, d) matrix) and report a KMeansResult.
    """

    def __init__(self, config: KMeansConfig):
        self.config = config

    @abstractmethod
    def fit(self, samples: np.ndarray) -> 'BaseKMeans':
        """Learn the group centers. Returns self."""
        pass

    @abstractmethod
    def fit_predict(self, samples: np.ndarray) -> KMeansResult:
        """fit() and return the partition of the same samples."""
        pass


# ============================================================================
# sklearn backend
# ============================================================================

class SklearnKMeans(BaseKMeans):
    """
    sklearn-backed two-group k-means.

    Example:
        >>> projection = whitened @ direction
        >>> result = SklearnKMeans(KMeansConfig(n_init=5, max_iter=25)).fit_predict(projection)
        >>> result.cluster_sizes()
    """

    def __init__(self, config: Optional[KMeansConfig] = None):
        super().__init__(config or KMeansConfig())
        self._model: Optional[SklearnKMeansAlgorithm] = None

    def fit(self, samples: np.ndarray) -> 'SklearnKMeans':
        features = as_feature_matrix(samples)
        if len(features) < self.config.n_clusters:
            raise ValueError(
                f"{len(features)} samples cannot form {self.config.n_clusters} groups"
            )

        self._model = SklearnKMeansAlgorithm(
            n_clusters=self.config.n_clusters,
            init=self.config.init_method,
            n_init=self.config.n_init,
            max_iter=self.config.max_iter,
            tol=self.config.tol,
            random_state=self.config.random_state,
        ).fit(features)
        return self

    def fit_predict(self, samples: np.ndarray) -> KMeansResult:
        model = self.fit(samples)._model
        n_iter = int(model.n_iter_)

        # labels_ belong to the kept restart; no second assignment pass
        return KMeansResult(
            labels=model.labels_,
            centroids=model.cluster_centers_,
            inertia=float(model.inertia_),
            n_iter=n_iter,
            converged=n_iter < self.config.max_iter,
        )

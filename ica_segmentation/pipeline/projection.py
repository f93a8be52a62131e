"""
Projection Pipeline

Load -> Whiten -> Search IC1 -> Build orthogonal basis (IC2, IC3)
     -> Project -> Reshape -> Return

The IC1 search covers the whole sphere and is the only stage run on a
process pool. The IC2 search covers one circle (1/180th of the work) and
always runs sequentially. Any failure aborts the run; there is no partial
result.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..basis import OrthogonalBasisBuilder, OrthonormalBasis
from ..config import PipelineConfig
from ..data_loader import subsample, to_pixel_matrix, validate_image
from ..directions import spherical_directions
from ..errors import ICASegmentationError
from ..kmeans import KMeansConfig, SklearnKMeans
from ..scoring import FisherScorer
from ..search import SearchResult, SequentialSearch, create_search
from ..whitening import WhiteningTransform, whiten

logger = logging.getLogger(__name__)


# ============================================================================
# Results
# ============================================================================

@dataclass
class ProjectionResult:
    """
    Output of one pipeline run.

    Attributes:
        images: Projection images, shape (H, W, 3); layer k is the whitened
                data projected onto IC(k+1). Unnormalized.
        basis: The IC1/IC2/IC3 directions
        whitening: The whitening map learned from the image
        ic1_search: Sphere search result (scores over the θ/φ grid)
        ic2_search: Circle search result (scores over α)
        segmentations: Optional two-cluster masks of each layer, shape (H, W, 3)
        elapsed: Wall-clock seconds of the run
    """
    images: np.ndarray
    basis: OrthonormalBasis
    whitening: WhiteningTransform
    ic1_search: SearchResult
    ic2_search: SearchResult
    segmentations: Optional[np.ndarray] = None
    elapsed: float = 0.0

    @property
    def shape(self) -> Tuple[int, int]:
        """(H, W) of the projection images."""
        return self.images.shape[:2]

    def layer(self, k: int) -> np.ndarray:
        """Projection image onto IC(k+1), shape (H, W)."""
        return self.images[:, :, k]

    def __str__(self) -> str:
        h, w = self.shape
        return (
            f"ProjectionResult({h}x{w}, "
            f"IC1 angles={self.ic1_search.angles.tolist()} score={self.ic1_search.score:.4g}, "
            f"IC2 angle={self.ic2_search.angles.tolist()} score={self.ic2_search.score:.4g})"
        )


# ============================================================================
# Segmentation of a projection image
# ============================================================================

def segment_projection(
    projection: np.ndarray,
    n_init: int = 2,
    max_iter: int = 10,
    random_seed: Optional[int] = 42
) -> np.ndarray:
    """
    Split a projection image into two regions with 2-means.

    Labels are ordered so that 1 marks the cluster with the higher mean
    projection value.

    Args:
        projection: Grayscale projection image, shape (H, W)
        n_init: k-means restarts
        max_iter: k-means iteration cap
        random_seed: Clustering seed

    Returns:
        mask: Integer labels in {0, 1}, shape (H, W)
    """
    projection = np.asarray(projection, dtype=np.float64)
    if projection.ndim != 2:
        raise ValueError(f"projection must be 2D (H, W), got shape {projection.shape}")

    values = projection.ravel()
    if np.ptp(values) == 0.0:
        return np.zeros(projection.shape, dtype=np.int64)

    config = KMeansConfig(
        n_clusters=2,
        max_iter=max_iter,
        n_init=n_init,
        random_state=random_seed,
    )
    result = SklearnKMeans(config).fit_predict(values)

    mask = result.reshape_labels(projection.shape).astype(np.int64)
    if result.centroids[0, 0] > result.centroids[1, 0]:
        mask = 1 - mask
    return mask


# ============================================================================
# Orchestrator
# ============================================================================

def _project(whitened: np.ndarray, basis: OrthonormalBasis, shape: Tuple[int, int]) -> np.ndarray:
    """Project whitened pixels on each basis vector and reshape to (H, W, 3)."""
    h, w = shape
    projections = whitened @ basis.as_matrix()  # (N, 3), column k on IC(k+1)
    return projections.reshape(h, w, 3)


def find_optimal_projections(
    image: np.ndarray,
    config: Optional[PipelineConfig] = None,
    segment: bool = False
) -> ProjectionResult:
    """
    Find three orthogonal projections of an image that best split its pixels in two.

    Args:
        image: RGB image, shape (H, W, 3), values in [0, 1] or [0, 255]
        config: Pipeline configuration. If None, uses defaults.
        segment: Also compute the two-cluster mask of every projection image

    Returns:
        result: ProjectionResult; result.images has shape
                (ceil(H / stride), ceil(W / stride), 3)

    Raises:
        InvalidConfigurationError: Malformed image (checked before any work)
        DegenerateInputError: Singular color covariance (e.g. grayscale image)

    Example:
        >>> image = load_image('Melanoma.jpg')
        >>> result = find_optimal_projections(image, PipelineConfig(subsample_stride=4))
        >>> plt.imshow(result.layer(0), cmap='gray')
    """
    config = config or PipelineConfig()
    image = validate_image(image)
    start_time = time.time()

    logger.info("Step 1: Preparing image %s (stride=%d)", image.shape, config.subsample_stride)
    working = subsample(image, config.subsample_stride)
    shape = working.shape[:2]
    pixels = to_pixel_matrix(working)

    logger.info("Step 2: Whitening %d pixels", pixels.shape[0])
    try:
        whitened, transform = whiten(pixels, eigenvalue_tol=config.eigenvalue_tol)
    except ICASegmentationError as exc:
        logger.error("Pipeline aborted: %s", exc)
        raise

    scorer = FisherScorer(
        n_init=config.nstart_kmeans,
        max_iter=config.niter_kmeans,
        random_seed=config.random_seed,
    )

    logger.info("Step 3: Searching the sphere for IC1")
    sphere = spherical_directions(step_deg=config.angular_step_deg)
    ic1_search = create_search(
        scorer,
        parallel=config.parallel,
        num_workers=config.num_workers,
        chunk_size=config.chunk_size,
        show_progress=config.show_progress,
    ).search(whitened, sphere)
    logger.info(
        "   - IC1 found: %s (theta, phi = %s, Fisher Index %.6g)",
        np.round(ic1_search.direction, 6).tolist(), ic1_search.angles.tolist(), ic1_search.score
    )

    logger.info("Step 4: Searching the circle orthogonal to IC1 for IC2")
    builder = OrthogonalBasisBuilder(
        SequentialSearch(scorer),
        step_deg=config.angular_step_deg,
        random_seed=config.random_seed,
    )
    basis, ic2_search = builder.build(whitened, ic1_search.direction)
    logger.info(
        "   - IC2 found: %s (Fisher Index %.6g)",
        np.round(basis.ic2, 6).tolist(), ic2_search.score
    )
    logger.info("Step 5: IC3 = IC1 x IC2: %s", np.round(basis.ic3, 6).tolist())

    logger.info("Step 6: Projecting whitened data onto the basis")
    images = _project(whitened, basis, shape)

    segmentations = None
    if segment:
        segmentations = np.stack([
            segment_projection(
                images[:, :, k],
                n_init=config.segment_nstart,
                max_iter=config.segment_niter,
                random_seed=config.random_seed,
            )
            for k in range(3)
        ], axis=-1)

    elapsed = time.time() - start_time
    logger.info("Projection pipeline finished in %.1f s", elapsed)

    return ProjectionResult(
        images=images,
        basis=basis,
        whitening=transform,
        ic1_search=ic1_search,
        ic2_search=ic2_search,
        segmentations=segmentations,
        elapsed=elapsed,
    )

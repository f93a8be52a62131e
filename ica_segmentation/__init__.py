"""
ICA-style melanoma image segmentation.

Whitens the RGB pixel cloud of an image and searches, by brute force over
the unit sphere, for the three orthogonal projection axes that maximize the
Fisher Index of a two-cluster split of the projected pixels.

Example:
    >>> from ica_segmentation import find_optimal_projections, PipelineConfig
    >>> from ica_segmentation.data_loader import load_image
    >>>
    >>> image = load_image('Melanoma.jpg')
    >>> result = find_optimal_projections(image, PipelineConfig(subsample_stride=4))
    >>> result.images.shape  # (H, W, 3), one layer per IC
"""

from .config import PipelineConfig
from .errors import (
    ICASegmentationError,
    DegenerateInputError,
    InvalidConfigurationError,
    DegenerateClusterWarning,
)
from .pipeline import ProjectionResult, find_optimal_projections, segment_projection

__version__ = "0.1.0"

__all__ = [
    'PipelineConfig',
    'ICASegmentationError',
    'DegenerateInputError',
    'InvalidConfigurationError',
    'DegenerateClusterWarning',
    'ProjectionResult',
    'find_optimal_projections',
    'segment_projection',
]

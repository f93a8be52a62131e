"""
Exception and warning types raised by the segmentation pipeline.
"""

from typing import Optional, Sequence


class ICASegmentationError(Exception):
    """Base class for every fatal pipeline error."""


class InvalidConfigurationError(ICASegmentationError, ValueError):
    """Bad configuration value or malformed input image, raised before any computation."""


class DegenerateInputError(ICASegmentationError):
    """
    Covariance of the pixel matrix is singular (or nearly so).

    Raised when a color channel is constant or a linear combination of the
    others, e.g. a grayscale image stored as RGB.

    Attributes:
        stage: Pipeline stage that failed
        eigenvalues: Covariance eigenvalues, if available
    """

    def __init__(
        self,
        message: str,
        stage: str = "whitening",
        eigenvalues: Optional[Sequence[float]] = None
    ):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.eigenvalues = None if eigenvalues is None else list(eigenvalues)


class DegenerateClusterWarning(UserWarning):
    """A projection could not be split into two clusters; its score is 0."""

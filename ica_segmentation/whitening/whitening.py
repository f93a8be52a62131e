"""
Whitening Transform

Centers the pixel matrix and rescales its principal axes so that the
empirical covariance of the result is the identity:

    Z = (X - μ) · W,    W = E · D^(-1/2)

where Σ = E D Eᵗ is the eigendecomposition of the covariance of X.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy import linalg

from ..errors import DegenerateInputError, InvalidConfigurationError

logger = logging.getLogger(__name__)


# ============================================================================
# Results
# ============================================================================

@dataclass(frozen=True)
class WhiteningTransform:
    """
    Learned whitening map (μ, W).

    Attributes:
        mean: Column means of the pixel matrix, shape (3,)
        matrix: Whitening matrix W = E·D^(-1/2), shape (3, 3)
        eigenvalues: Covariance eigenvalues (descending), shape (3,)
        eigenvectors: Matching eigenvectors as columns, shape (3, 3)
    """
    mean: np.ndarray
    matrix: np.ndarray
    eigenvalues: np.ndarray
    eigenvectors: np.ndarray

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        """
        Whiten pixel data with the learned map.

        Args:
            pixels: Pixel matrix, shape (N, 3)

        Returns:
            whitened: (pixels - mean) @ matrix, shape (N, 3)
        """
        return (np.asarray(pixels, dtype=np.float64) - self.mean) @ self.matrix


# ============================================================================
# Fitting
# ============================================================================

def fit_whitening(pixels: np.ndarray, eigenvalue_tol: float = 1e-10) -> WhiteningTransform:
    """
    Learn the whitening map of a pixel matrix.

    Args:
        pixels: RGB samples, shape (N, 3)
        eigenvalue_tol: An eigenvalue λ is degenerate when λ <= tol * λ_max
                        (and always when λ <= 0)

    Returns:
        transform: WhiteningTransform with mean, W and the eigendecomposition

    Raises:
        InvalidConfigurationError: If pixels is not (N, 3) with N >= 2
        DegenerateInputError: If the covariance has a non-positive or
                              near-zero eigenvalue
    """
    pixels = np.asarray(pixels, dtype=np.float64)
    if pixels.ndim != 2 or pixels.shape[1] != 3:
        raise InvalidConfigurationError(
            f"pixels must have shape (N, 3), got {pixels.shape}"
        )
    if pixels.shape[0] < 2:
        raise InvalidConfigurationError(
            f"at least 2 pixels are needed to estimate a covariance, got {pixels.shape[0]}"
        )

    mean = pixels.mean(axis=0)
    centered = pixels - mean
    covariance = np.cov(centered, rowvar=False)

    # eigh returns ascending order; flip to descending
    eigenvalues, eigenvectors = linalg.eigh(covariance)
    eigenvalues = eigenvalues[::-1]
    eigenvectors = eigenvectors[:, ::-1]

    threshold = eigenvalue_tol * max(float(eigenvalues[0]), 0.0)
    bad = np.flatnonzero((eigenvalues <= 0) | (eigenvalues <= threshold))
    if bad.size > 0:
        raise DegenerateInputError(
            f"covariance eigenvalue(s) {eigenvalues[bad].tolist()} at position(s) "
            f"{bad.tolist()} are not strictly positive (threshold {threshold:.3e}); "
            f"the image has a constant or rank-deficient color channel",
            stage="whitening",
            eigenvalues=eigenvalues,
        )

    matrix = eigenvectors @ np.diag(1.0 / np.sqrt(eigenvalues))
    logger.debug("Covariance eigenvalues: %s", eigenvalues)

    return WhiteningTransform(
        mean=mean,
        matrix=matrix,
        eigenvalues=eigenvalues,
        eigenvectors=eigenvectors,
    )


def whiten(pixels: np.ndarray, eigenvalue_tol: float = 1e-10) -> Tuple[np.ndarray, WhiteningTransform]:
    """
    Fit the whitening map and apply it in one step.

    Args:
        pixels: RGB samples, shape (N, 3)
        eigenvalue_tol: See fit_whitening()

    Returns:
        (whitened, transform): Whitened data (N, 3) and the learned map

    Example:
        >>> z, transform = whiten(image.reshape(-1, 3))
        >>> np.allclose(np.cov(z, rowvar=False), np.eye(3))
        True
    """
    transform = fit_whitening(pixels, eigenvalue_tol=eigenvalue_tol)
    return transform.apply(pixels), transform

"""
Unit tests for the whitening transform.
"""

import numpy as np
import pytest

from ica_segmentation import DegenerateInputError, InvalidConfigurationError
from ica_segmentation.whitening import fit_whitening, whiten


class TestWhitening:
    """Covariance and mean of whitened data."""

    def test_covariance_is_identity(self, correlated_pixels):
        z, _ = whiten(correlated_pixels)

        assert np.allclose(np.cov(z, rowvar=False), np.eye(3), atol=1e-8)

    def test_whitened_data_is_centered(self, correlated_pixels):
        z, transform = whiten(correlated_pixels)

        assert np.allclose(z.mean(axis=0), 0.0, atol=1e-10)
        assert np.allclose(transform.mean, correlated_pixels.mean(axis=0))

    def test_matrix_is_eigenvectors_over_sqrt_eigenvalues(self, correlated_pixels):
        transform = fit_whitening(correlated_pixels)

        expected = transform.eigenvectors @ np.diag(transform.eigenvalues ** -0.5)
        assert np.allclose(transform.matrix, expected)
        assert np.all(np.diff(transform.eigenvalues) <= 0)

    def test_apply_matches_whiten(self, correlated_pixels):
        z, transform = whiten(correlated_pixels)

        assert np.allclose(transform.apply(correlated_pixels), z)

    def test_0_255_scale_also_whitens(self, correlated_pixels):
        z, _ = whiten(correlated_pixels * 255.0)

        assert np.allclose(np.cov(z, rowvar=False), np.eye(3), atol=1e-8)


class TestWhiteningErrors:
    """Degenerate and malformed input."""

    def test_grayscale_pixels_are_degenerate(self, rng):
        gray = rng.uniform(size=(50, 1)).repeat(3, axis=1)

        with pytest.raises(DegenerateInputError) as excinfo:
            fit_whitening(gray)

        assert excinfo.value.stage == "whitening"
        assert len(excinfo.value.eigenvalues) == 3

    def test_constant_image_is_degenerate(self):
        with pytest.raises(DegenerateInputError):
            fit_whitening(np.full((20, 3), 0.5))

    def test_wrong_shape_rejected(self, rng):
        with pytest.raises(InvalidConfigurationError):
            fit_whitening(rng.uniform(size=(10, 4)))

    def test_single_pixel_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            fit_whitening(np.array([[0.1, 0.2, 0.3]]))

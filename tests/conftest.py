"""
Pytest configuration and shared fixtures for the projection pipeline tests.

This module provides:
    - Synthetic RGB images (random, two-block, grayscale)
    - A small pipeline configuration that runs in seconds
    - A cached pipeline result for the plotting tests
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from ica_segmentation import PipelineConfig, find_optimal_projections


def make_two_block_image(seed: int = 0, jitter: float = 0.01) -> np.ndarray:
    """
    4x4 image, dark top half and bright bottom half, with small per-channel
    noise so the color covariance has full rank.
    """
    rng = np.random.default_rng(seed)
    image = np.empty((4, 4, 3))
    image[:2] = [0.2, 0.3, 0.1]
    image[2:] = [0.8, 0.7, 0.9]
    return image + rng.normal(0.0, jitter, size=image.shape)


@pytest.fixture
def rng():
    """Seeded generator for test data."""
    return np.random.default_rng(1234)


@pytest.fixture
def correlated_pixels(rng):
    """(500, 3) pixel matrix with strongly correlated channels."""
    mixing = np.array([
        [1.0, 0.8, 0.3],
        [0.0, 0.5, 0.4],
        [0.0, 0.0, 0.2],
    ])
    return rng.normal(size=(500, 3)) @ mixing + np.array([0.5, 0.4, 0.3])


@pytest.fixture
def random_image(rng):
    """6x5 RGB image with independent uniform channels."""
    return rng.uniform(0.0, 1.0, size=(6, 5, 3))


@pytest.fixture
def two_block_image():
    """4x4 two-region image (top dark, bottom bright)."""
    return make_two_block_image()


@pytest.fixture
def gray_two_block_image():
    """4x4 image with R == G == B: rank-1 color covariance."""
    image = np.zeros((4, 4, 3))
    image[2:] = 1.0
    return image


@pytest.fixture
def fast_config():
    """Coarse sequential configuration (12 x 6 sphere directions)."""
    return PipelineConfig(
        nstart_kmeans=2,
        niter_kmeans=10,
        angular_step_deg=30,
        parallel=False,
        random_seed=7,
    )


@pytest.fixture(scope="session")
def small_result():
    """Pipeline result with segmentations on a random 6x5 image."""
    image = np.random.default_rng(99).uniform(size=(6, 5, 3))
    config = PipelineConfig(
        nstart_kmeans=2,
        niter_kmeans=10,
        angular_step_deg=30,
        parallel=False,
    )
    return find_optimal_projections(image, config, segment=True)

"""
Image loading for the projection pipeline.

Decodes image files with Pillow and turns (H, W, 3) arrays into the
(N, 3) pixel matrix consumed by the whitening step.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..errors import InvalidConfigurationError


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as RGB floats in [0, 1].

    Grayscale, palette and RGBA images are converted to RGB.

    Args:
        path: Path of the image file

    Returns:
        image: Array of shape (H, W, 3), dtype float64

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as img:
        rgb = img.convert('RGB')
        image = np.asarray(rgb, dtype=np.float64) / 255.0

    return image


def validate_image(image: np.ndarray) -> np.ndarray:
    """
    Check that an array is a finite, non-empty (H, W, 3) image.

    Args:
        image: Candidate image array

    Returns:
        image: The same data as float64

    Raises:
        InvalidConfigurationError: If the shape or values are unusable
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise InvalidConfigurationError(
            f"image must have shape (H, W, 3), got {image.shape}"
        )
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidConfigurationError(f"image is empty, shape {image.shape}")

    image = image.astype(np.float64, copy=False)
    if not np.all(np.isfinite(image)):
        raise InvalidConfigurationError("image contains NaN or infinite values")

    return image


def subsample(image: np.ndarray, stride: int = 1) -> np.ndarray:
    """
    Keep every `stride`-th row and column, starting with the first.

    Args:
        image: Array of shape (H, W, 3)
        stride: Positive step; 1 returns the image unchanged

    Returns:
        image: Shape (ceil(H / stride), ceil(W / stride), 3)
    """
    if stride < 1:
        raise InvalidConfigurationError(f"stride must be >= 1, got {stride}")
    if stride == 1:
        return image
    return image[::stride, ::stride, :]


def to_pixel_matrix(image: np.ndarray) -> np.ndarray:
    """
    Flatten an (H, W, 3) image to an (H*W, 3) pixel matrix in row-major order.

    The inverse is `values.reshape(H, W)` for any per-pixel vector.
    """
    h, w, c = image.shape
    return image.reshape(h * w, c)

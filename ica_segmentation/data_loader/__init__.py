"""
Image loading and pixel-matrix preparation.

Example:
    >>> from ica_segmentation.data_loader import load_image, subsample, to_pixel_matrix
    >>>
    >>> image = load_image('Melanoma.jpg')       # (H, W, 3) floats in [0, 1]
    >>> small = subsample(image, stride=4)        # every 4th row and column
    >>> pixels = to_pixel_matrix(small)           # (H*W, 3)
"""

from .image_loader import load_image, validate_image, subsample, to_pixel_matrix

__all__ = ['load_image', 'validate_image', 'subsample', 'to_pixel_matrix']

"""
Whitening module: centers RGB pixel data and decorrelates it to identity covariance.
"""

from .whitening import WhiteningTransform, fit_whitening, whiten

__all__ = ['WhiteningTransform', 'fit_whitening', 'whiten']

"""
Visualization of projection images, histograms, score surfaces and masks.
"""

from .projection_plots import (
    plot_image_grid,
    plot_projection_images,
    plot_projection_histograms,
    plot_score_surface,
    plot_segmentations,
)

__all__ = [
    'plot_image_grid',
    'plot_projection_images',
    'plot_projection_histograms',
    'plot_score_surface',
    'plot_segmentations',
]

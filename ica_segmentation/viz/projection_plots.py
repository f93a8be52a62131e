"""
Plotting utilities for projection pipeline results.

All functions take arrays or result objects and return a matplotlib Figure;
nothing here feeds back into the computation.
"""

from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from ..search import SearchResult

_IC_NAMES = ('IC1', 'IC2', 'IC3')


def plot_image_grid(
    images: List[np.ndarray],
    titles: List[str],
    figsize: Tuple[int, int] = (18, 6),
    cmap: Optional[str] = None
) -> plt.Figure:
    """
    Show several images side by side in one row.

    Args:
        images: Arrays of shape (H, W) or (H, W, 3)
        titles: One title per image
        figsize: Figure size (width, height) in inches
        cmap: Colormap for 2D images, e.g. 'gray'

    Returns:
        fig: Figure with one axis per image, axes hidden

    Raises:
        ValueError: If images and titles differ in length
    """
    if len(images) != len(titles):
        raise ValueError(
            f"Number of images ({len(images)}) must match "
            f"number of titles ({len(titles)})"
        )

    n_images = len(images)
    fig, axes = plt.subplots(1, n_images, figsize=figsize)

    # a single subplot is not returned as an array
    if n_images == 1:
        axes = [axes]

    for ax, img, title in zip(axes, images, titles):
        ax.imshow(img, cmap=cmap)
        ax.axis('off')
        ax.set_title(title, fontsize=14, pad=10)

    plt.tight_layout()
    return fig


def plot_projection_images(result, figsize: Tuple[int, int] = (18, 6)) -> plt.Figure:
    """
    The three grayscale projection images of a ProjectionResult.

    Example:
        >>> fig = plot_projection_images(result)
        >>> fig.savefig('projections.png')
    """
    return plot_image_grid(
        [result.layer(k) for k in range(3)],
        [f'Projection {k + 1} ({name})' for k, name in enumerate(_IC_NAMES)],
        figsize=figsize,
        cmap='gray',
    )


def plot_projection_histograms(
    result,
    bins: int = 50,
    figsize: Tuple[int, int] = (18, 5)
) -> plt.Figure:
    """Histogram of each projection; a bimodal IC1 histogram means a good split."""
    fig, axes = plt.subplots(1, 3, figsize=figsize)
    for k, (ax, name) in enumerate(zip(axes, _IC_NAMES)):
        ax.hist(result.layer(k).ravel(), bins=bins, color='steelblue', edgecolor='white')
        ax.set_title(f'Histogram of {name} projection', fontsize=12)
        ax.set_xlabel('Projected value')
        ax.set_ylabel('Pixels')
    plt.tight_layout()
    return fig


def plot_score_surface(
    search: SearchResult,
    figsize: Tuple[int, int] = (10, 6)
) -> plt.Figure:
    """
    Fisher Index over the search grid.

    A sphere search is drawn as a θ/φ heat-map with the maximum marked;
    a circle search is drawn as a curve over α.
    """
    fig, ax = plt.subplots(figsize=figsize)
    angles = search.directions.angles

    if search.directions.mode == 'spherical':
        surface = search.surface()  # (n_theta, n_phi)
        thetas = np.unique(angles[:, 0])
        phis = np.unique(angles[:, 1])
        mesh = ax.pcolormesh(thetas, phis, surface.T, shading='nearest', cmap='viridis')
        fig.colorbar(mesh, ax=ax, label='Fisher Index')
        theta_max, phi_max = search.angles
        ax.plot(theta_max, phi_max, 'r+', markersize=14, markeredgewidth=2)
        ax.set_xlabel('Theta (degrees)')
        ax.set_ylabel('Phi (degrees)')
        ax.set_title('Fisher Index Optimization Surface')
    else:
        ax.plot(angles[:, 0], search.scores, color='steelblue')
        ax.axvline(search.angles[0], color='red', linestyle='--')
        ax.set_xlabel('Alpha (degrees)')
        ax.set_ylabel('Fisher Index')
        ax.set_title('Fisher Index on the orthogonal circle')

    plt.tight_layout()
    return fig


def plot_segmentations(result, figsize: Tuple[int, int] = (18, 6)) -> plt.Figure:
    """
    Binary masks of the three projections (black / white).

    Raises:
        ValueError: If the result was computed without segment=True
    """
    if result.segmentations is None:
        raise ValueError("Result has no segmentations; run the pipeline with segment=True")

    return plot_image_grid(
        [result.segmentations[:, :, k] for k in range(3)],
        [f'Segmentation - {name}' for name in _IC_NAMES],
        figsize=figsize,
        cmap='gray',
    )

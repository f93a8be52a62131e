"""
Command line entry point.

    python -m ica_segmentation Melanoma.jpg --stride 4 --output projections.npy --figure projections.png

Runs the projection pipeline on one image file and saves the (H, W, 3)
projection array with numpy.save.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import PipelineConfig
from .data_loader import load_image
from .errors import ICASegmentationError
from .pipeline import find_optimal_projections

logger = logging.getLogger("ica_segmentation")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ica-segmentation",
        description="Find three orthogonal Fisher-Index-maximizing projections of an RGB image.",
    )
    parser.add_argument("image", type=Path, help="Input image file")
    parser.add_argument("--stride", type=int, default=1, help="Subsampling stride (default: 1)")
    parser.add_argument("--nstart", type=int, default=5, help="k-means restarts per direction")
    parser.add_argument("--niter", type=int, default=25, help="k-means iterations per restart")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes (default: CPUs - 1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--step", type=int, default=1, help="Angular step in degrees (divisor of 180)")
    parser.add_argument("--sequential", action="store_true", help="Do not use a process pool")
    parser.add_argument("--segment", action="store_true", help="Also compute binary segmentations")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--output", type=Path, default=None, help="Where to save the .npy projection array")
    parser.add_argument("--figure", type=Path, default=None, help="Where to save a figure of the projections")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def _save_figure(result, path: Path) -> None:
    import matplotlib
    matplotlib.use("Agg")
    from .viz import plot_projection_images

    fig = plot_projection_images(result)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    logger.info("Figure written to %s", path)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        config = PipelineConfig(
            nstart_kmeans=args.nstart,
            niter_kmeans=args.niter,
            subsample_stride=args.stride,
            num_workers=args.workers,
            random_seed=args.seed,
            angular_step_deg=args.step,
            parallel=not args.sequential,
            show_progress=args.progress,
        )
        image = load_image(args.image)
        result = find_optimal_projections(image, config, segment=args.segment)
    except (ICASegmentationError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("%s", result)

    if args.output is not None:
        np.save(args.output, result.images)
        logger.info("Projection array %s written to %s", result.images.shape, args.output)
        if result.segmentations is not None:
            mask_path = args.output.with_name(args.output.stem + "_segmentation.npy")
            np.save(mask_path, result.segmentations)
            logger.info("Segmentation masks written to %s", mask_path)

    if args.figure is not None:
        _save_figure(result, args.figure)

    return 0


if __name__ == "__main__":
    sys.exit(main())

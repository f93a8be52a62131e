"""
Pipeline Configuration

Options recognized by the projection pipeline, validated on construction.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidConfigurationError


def default_worker_count() -> int:
    """Hardware concurrency minus one, leaving a core for the orchestrating process."""
    return max(1, (os.cpu_count() or 1) - 1)


@dataclass
class PipelineConfig:
    """
    Configuration for one run of the projection pipeline.

    Attributes:
        nstart_kmeans: Random restarts per clustering call
        niter_kmeans: Maximum k-means iterations per restart
        subsample_stride: Keep one pixel out of every `stride` along each axis
        num_workers: Worker processes for the sphere search (None = CPUs - 1)
        random_seed: Seed for the Gram-Schmidt vector and clustering initialization
        angular_step_deg: Degree step of the direction grids (1 = full resolution)
        parallel: Search the sphere on a process pool
        chunk_size: Directions per pool work item (None = automatic)
        show_progress: Show a progress bar over the sphere search
        eigenvalue_tol: Relative eigenvalue threshold for degenerate covariance
        segment_nstart: Restarts for the binary segmentation pass
        segment_niter: Iterations for the binary segmentation pass
    """
    nstart_kmeans: int = 5
    """Number of random initializations of each 2-cluster k-means."""

    niter_kmeans: int = 25
    """Iteration cap of each k-means restart."""

    subsample_stride: int = 1
    """1 keeps every pixel; 4 reproduces the quick subsampled run."""

    num_workers: Optional[int] = None
    """Resolved to default_worker_count() when left as None."""

    random_seed: int = 42
    """Non-negative. Each direction clusters with a seed derived from (random_seed, index)."""

    angular_step_deg: int = 1
    """Must divide 180. 1 gives 64,800 sphere directions and 360 circle directions."""

    parallel: bool = True

    chunk_size: Optional[int] = None

    show_progress: bool = False

    eigenvalue_tol: float = 1e-10

    segment_nstart: int = 2
    segment_niter: int = 10

    def __post_init__(self):
        """Validate configuration parameters."""
        for name in ('nstart_kmeans', 'niter_kmeans', 'subsample_stride',
                     'segment_nstart', 'segment_niter'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise InvalidConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )

        if self.num_workers is None:
            self.num_workers = default_worker_count()
        elif not isinstance(self.num_workers, int) or self.num_workers < 1:
            raise InvalidConfigurationError(
                f"num_workers must be a positive integer, got {self.num_workers!r}"
            )

        # seeds numpy's SeedSequence, which takes non-negative integers only
        if (not isinstance(self.random_seed, int)
                or isinstance(self.random_seed, bool)
                or self.random_seed < 0):
            raise InvalidConfigurationError(
                f"random_seed must be a non-negative integer, got {self.random_seed!r}"
            )

        if (not isinstance(self.angular_step_deg, int)
                or self.angular_step_deg < 1
                or 180 % self.angular_step_deg != 0):
            raise InvalidConfigurationError(
                f"angular_step_deg must be a positive divisor of 180, "
                f"got {self.angular_step_deg!r}"
            )

        if self.chunk_size is not None and self.chunk_size < 1:
            raise InvalidConfigurationError(
                f"chunk_size must be >= 1, got {self.chunk_size}"
            )

        if not self.eigenvalue_tol >= 0:
            raise InvalidConfigurationError(
                f"eigenvalue_tol must be non-negative, got {self.eigenvalue_tol}"
            )

"""
Best-Direction Search

Scores every direction of a DirectionSet and keeps the arg-max. Each
evaluation is an independent, pure function of (whitened data, direction,
seed, index), so the work can be split across processes in any way; the
reduction is "highest score, then lowest enumeration index" in every case.
"""

import logging
import multiprocessing
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from threadpoolctl import threadpool_limits
from tqdm import tqdm

from ..directions import DirectionSet
from ..scoring import FisherScorer

logger = logging.getLogger(__name__)


# ============================================================================
# Results
# ============================================================================

@dataclass
class SearchResult:
    """
    Outcome of one search pass.

    Attributes:
        direction: Winning unit vector, shape (3,)
        score: Its Fisher Index
        index: Its position in the DirectionSet
        scores: Fisher Index of every direction, shape (M,)
        directions: The DirectionSet that was searched
    """
    direction: np.ndarray
    score: float
    index: int
    scores: np.ndarray
    directions: DirectionSet

    @property
    def angles(self) -> np.ndarray:
        """Angles (degrees) of the winning direction: (θ, φ) or (α,)."""
        return self.directions.angles[self.index]

    def surface(self) -> np.ndarray:
        """Scores on the angle grid, (n_theta, n_phi) for a sphere search."""
        return self.directions.to_grid(self.scores)


def best_index(scores: np.ndarray) -> int:
    """
    Index of the highest score; the first one wins ties.

    Raises:
        ValueError: If scores is empty
    """
    scores = np.asarray(scores, dtype=np.float64)
    if scores.size == 0:
        raise ValueError("Cannot pick a best direction from an empty score vector")
    return int(np.argmax(scores))


# ============================================================================
# Abstract Base Class (Interface)
# ============================================================================

class BaseDirectionSearch(ABC):
    """
    Drives a FisherScorer over all directions of a set.

    Subclasses only decide how the per-direction scores are computed;
    reduction and result packaging are shared.
    """

    def __init__(self, scorer: FisherScorer, show_progress: bool = False):
        self.scorer = scorer
        self.show_progress = show_progress

    @abstractmethod
    def evaluate(self, whitened: np.ndarray, directions: DirectionSet) -> Tuple[np.ndarray, int]:
        """
        Fisher Index of every direction.

        Args:
            whitened: Whitened pixel matrix, shape (N, 3), read-only
            directions: Candidate directions

        Returns:
            (scores, n_degenerate): scores of shape (len(directions),) in
                enumeration order, and how many directions had no two-cluster split
        """
        pass

    def search(self, whitened: np.ndarray, directions: DirectionSet) -> SearchResult:
        """
        Find the direction with the highest Fisher Index.

        Args:
            whitened: Whitened pixel matrix, shape (N, 3)
            directions: Candidate directions

        Returns:
            result: SearchResult with the winner and the full score vector
        """
        if len(directions) == 0:
            raise ValueError("DirectionSet is empty")

        scores, n_degenerate = self.evaluate(whitened, directions)
        if n_degenerate:
            logger.info(
                "%d of %d %s directions could not be split into two clusters and scored 0",
                n_degenerate, len(directions), directions.mode
            )
        index = best_index(scores)

        logger.debug(
            "Best of %d %s directions: index %d, angles %s, score %.6g",
            len(directions), directions.mode, index,
            directions.angles[index].tolist(), scores[index]
        )

        return SearchResult(
            direction=directions.vectors[index].copy(),
            score=float(scores[index]),
            index=index,
            scores=scores,
            directions=directions,
        )


# ============================================================================
# Sequential Implementation
# ============================================================================

class SequentialSearch(BaseDirectionSearch):
    """Scores directions one after another in the calling process."""

    def evaluate(self, whitened: np.ndarray, directions: DirectionSet) -> Tuple[np.ndarray, int]:
        scores = np.zeros(len(directions), dtype=np.float64)
        n_degenerate = 0
        iterator = tqdm(
            range(len(directions)),
            desc=f"Scoring {directions.mode} directions",
            disable=not self.show_progress,
        )
        for i in iterator:
            projection = self.scorer.project(whitened, directions.vectors[i])
            scores[i], reason = self.scorer.split_score(projection, index=i)
            if reason is not None:
                logger.debug("Direction %d scored 0: %s", i, reason)
                n_degenerate += 1
        return scores, n_degenerate


# ============================================================================
# Process Pool Implementation
# ============================================================================

# Read-only state of each worker process, set once by _init_worker
_shared_whitened: Optional[np.ndarray] = None
_shared_vectors: Optional[np.ndarray] = None
_shared_scorer: Optional[FisherScorer] = None


def _init_worker(whitened: np.ndarray, vectors: np.ndarray, scorer: FisherScorer) -> None:
    """Initialize worker process with shared data."""
    global _shared_whitened, _shared_vectors, _shared_scorer
    _shared_whitened = whitened
    _shared_vectors = vectors
    _shared_scorer = scorer
    # one BLAS/OpenMP thread per worker, the pool already uses the cores
    threadpool_limits(limits=1)


def _score_chunk(bounds: Tuple[int, int]) -> Tuple[int, np.ndarray, int]:
    """
    Worker function: score directions[start:stop].

    Returns:
        (start, scores, n_degenerate) so the parent can place the chunk back
        in order and report degenerate directions once.
    """
    start, stop = bounds
    scores = np.zeros(stop - start, dtype=np.float64)
    n_degenerate = 0
    for offset, i in enumerate(range(start, stop)):
        projection = _shared_scorer.project(_shared_whitened, _shared_vectors[i])
        scores[offset], reason = _shared_scorer.split_score(projection, index=i)
        n_degenerate += reason is not None
    return start, scores, n_degenerate


class ParallelSearch(BaseDirectionSearch):
    """
    Scores directions on a process pool.

    The pool is created when evaluate() starts and is always torn down when
    it returns or raises. Worker exceptions propagate to the caller.

    Example:
        >>> search = ParallelSearch(FisherScorer(), num_workers=7)
        >>> result = search.search(whitened, spherical_directions())
        >>> result.angles  # (θ, φ) of IC1
    """

    def __init__(
        self,
        scorer: FisherScorer,
        num_workers: int,
        chunk_size: Optional[int] = None,
        show_progress: bool = False,
        start_method: str = "spawn"
    ):
        super().__init__(scorer, show_progress=show_progress)
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.num_workers = num_workers
        self.chunk_size = chunk_size
        self.start_method = start_method

    def _chunks(self, n_directions: int):
        # ~4 chunks per worker keeps the pool busy without much IPC
        size = self.chunk_size or max(1, -(-n_directions // (self.num_workers * 4)))
        return [(start, min(start + size, n_directions)) for start in range(0, n_directions, size)]

    def evaluate(self, whitened: np.ndarray, directions: DirectionSet) -> Tuple[np.ndarray, int]:
        chunks = self._chunks(len(directions))
        scores = np.zeros(len(directions), dtype=np.float64)
        n_degenerate = 0

        logger.info(
            "Scoring %d %s directions on %d workers (%d chunks)",
            len(directions), directions.mode, self.num_workers, len(chunks)
        )

        ctx = multiprocessing.get_context(self.start_method)
        with ctx.Pool(
            processes=self.num_workers,
            initializer=_init_worker,
            initargs=(whitened, directions.vectors, self.scorer),
        ) as pool:
            for start, chunk_scores, chunk_degenerate in tqdm(
                pool.imap_unordered(_score_chunk, chunks),
                total=len(chunks),
                desc=f"Scoring {directions.mode} directions",
                disable=not self.show_progress,
            ):
                scores[start:start + len(chunk_scores)] = chunk_scores
                n_degenerate += chunk_degenerate

        return scores, n_degenerate


def create_search(
    scorer: FisherScorer,
    parallel: bool = False,
    num_workers: int = 1,
    chunk_size: Optional[int] = None,
    show_progress: bool = False
) -> BaseDirectionSearch:
    """
    Pick a search strategy.

    A pool with a single worker adds overhead and nothing else, so
    parallel=True with num_workers=1 falls back to the sequential search.
    """
    if parallel and num_workers > 1:
        return ParallelSearch(
            scorer,
            num_workers=num_workers,
            chunk_size=chunk_size,
            show_progress=show_progress,
        )
    return SequentialSearch(scorer, show_progress=show_progress)

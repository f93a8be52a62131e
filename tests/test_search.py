"""
Unit tests for the best-direction search strategies.

Tests cover:
    - Arg-max and tie-break rule
    - Single-direction sets
    - Sequential search over a coarse sphere
    - Process-pool search agreeing with the sequential one
    - Worker failures surfacing from the pool
    - Degenerate directions reported once per search
"""

import logging
import multiprocessing
import warnings

import numpy as np
import pytest

from ica_segmentation import DegenerateClusterWarning
from ica_segmentation.directions import DirectionSet, spherical_directions
from ica_segmentation.scoring import FisherScorer
from ica_segmentation.search import (
    ParallelSearch,
    SequentialSearch,
    best_index,
    create_search,
)
from ica_segmentation.whitening import whiten


@pytest.fixture
def whitened(correlated_pixels):
    z, _ = whiten(correlated_pixels[:60])
    return z


@pytest.fixture
def outlier_pixels(rng):
    """Whitened-like cloud with one far outlier, so 2-means isolates it on most directions."""
    z = rng.normal(size=(40, 3))
    z[0] = [0.0, 0.0, 1000.0]
    return z


class FailingScorer(FisherScorer):
    """Scorer that raises on every direction."""

    def split_score(self, projection, index=0):
        raise RuntimeError(f"scoring failed at direction {index}")


class TestBestIndex:

    def test_picks_maximum(self):
        assert best_index(np.array([0.5, 2.0, 1.0])) == 1

    def test_first_maximum_wins_ties(self):
        assert best_index(np.array([1.0, 3.0, 3.0, 2.0])) == 1

    def test_empty(self):
        with pytest.raises(ValueError):
            best_index(np.array([]))


class TestSequentialSearch:

    def test_single_direction_set(self, whitened):
        vector = np.array([[0.0, 0.6, 0.8]])
        directions = DirectionSet(
            vectors=vector,
            angles=np.array([[90.0]]),
            mode='circular',
            grid_shape=(1,),
        )
        scorer = FisherScorer(n_init=2, max_iter=10)

        result = SequentialSearch(scorer).search(whitened, directions)

        assert result.index == 0
        assert np.array_equal(result.direction, vector[0])
        assert result.score == scorer.score(whitened, vector[0], index=0)

    def test_coarse_sphere(self, whitened):
        directions = spherical_directions(step_deg=30)

        result = SequentialSearch(FisherScorer(n_init=2, max_iter=10)).search(whitened, directions)

        assert result.scores.shape == (72,)
        assert result.score == result.scores.max()
        assert result.index == int(np.argmax(result.scores))
        assert np.array_equal(result.direction, directions[result.index])
        assert result.surface().shape == (12, 6)
        assert result.angles.shape == (2,)

    def test_empty_set_rejected(self, whitened):
        empty = DirectionSet(np.zeros((0, 3)), np.zeros((0, 1)), 'circular', (0,))

        with pytest.raises(ValueError):
            SequentialSearch(FisherScorer()).search(whitened, empty)


class TestParallelSearch:

    def test_matches_sequential(self, whitened):
        """Scores do not depend on how directions are split across workers."""
        directions = spherical_directions(step_deg=30)
        scorer = FisherScorer(n_init=2, max_iter=10, random_seed=5)

        sequential = SequentialSearch(scorer).search(whitened, directions)
        parallel = ParallelSearch(scorer, num_workers=2, chunk_size=7).search(whitened, directions)

        assert np.array_equal(parallel.scores, sequential.scores)
        assert parallel.index == sequential.index

    def test_worker_failure_propagates_and_releases_pool(self, whitened):
        search = ParallelSearch(FailingScorer(), num_workers=2)

        with pytest.raises(RuntimeError, match="scoring failed"):
            search.search(whitened, spherical_directions(step_deg=60))

        assert multiprocessing.active_children() == []

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ParallelSearch(FisherScorer(), num_workers=0)

    def test_chunks_cover_all_directions(self):
        search = ParallelSearch(FisherScorer(), num_workers=3)

        chunks = search._chunks(100)

        assert chunks[0][0] == 0
        assert chunks[-1][1] == 100
        assert all(a[1] == b[0] for a, b in zip(chunks, chunks[1:]))


class TestCreateSearch:

    def test_parallel_with_workers(self):
        assert isinstance(create_search(FisherScorer(), parallel=True, num_workers=4), ParallelSearch)

    def test_single_worker_is_sequential(self):
        assert isinstance(create_search(FisherScorer(), parallel=True, num_workers=1), SequentialSearch)

    def test_sequential_requested(self):
        assert isinstance(create_search(FisherScorer(), parallel=False, num_workers=8), SequentialSearch)


class TestDegenerateDirections:

    @pytest.mark.parametrize("make_search", [
        lambda scorer: SequentialSearch(scorer),
        lambda scorer: ParallelSearch(scorer, num_workers=2, chunk_size=5),
    ], ids=["sequential", "parallel"])
    def test_counted_once_without_warnings(self, outlier_pixels, caplog, make_search):
        search = make_search(FisherScorer(n_init=2, max_iter=10))

        with warnings.catch_warnings():
            warnings.simplefilter("error", DegenerateClusterWarning)
            with caplog.at_level(logging.INFO, logger="ica_segmentation"):
                result = search.search(outlier_pixels, spherical_directions(step_deg=60))

        reports = [r for r in caplog.records if "could not be split" in r.getMessage()]
        assert len(reports) == 1
        assert reports[0].levelno == logging.INFO
        assert result.scores.min() == 0.0


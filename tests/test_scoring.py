"""
Unit tests for the Fisher Index scorer.
"""

import warnings

import numpy as np
import pytest

from ica_segmentation import DegenerateClusterWarning
from ica_segmentation.scoring import FISHER_EPSILON, FisherScorer, direction_seed, fisher_index
from ica_segmentation.whitening import whiten


class TestFisherIndex:
    """The statistic itself, on fixed labellings."""

    def test_formula(self):
        values = np.array([0.0, 1.0, 2.0, 10.0, 11.0, 12.0])
        labels = np.array([0, 0, 0, 1, 1, 1])

        # means 1 and 11, sample variances 1 and 1
        assert fisher_index(values, labels) == pytest.approx(100.0 / (2.0 + FISHER_EPSILON))

    def test_zero_variance_clusters_stay_finite(self):
        values = np.array([0.0] * 8 + [1.0] * 8)
        labels = np.array([0] * 8 + [1] * 8)

        assert fisher_index(values, labels) == pytest.approx(1.0 / FISHER_EPSILON)

    def test_single_point_cluster_scores_zero(self):
        values = np.array([0.0, 0.1, 0.2, 9.0])
        labels = np.array([0, 0, 0, 1])

        assert fisher_index(values, labels) == 0.0


class TestFisherScorer:
    """Projection, clustering and scoring of one direction."""

    def test_scores_are_non_negative(self, correlated_pixels, rng):
        z, _ = whiten(correlated_pixels)
        scorer = FisherScorer(n_init=2, max_iter=10)

        for i in range(10):
            direction = rng.normal(size=3)
            direction /= np.linalg.norm(direction)
            assert scorer.score(z, direction, index=i) >= 0.0

    def test_constant_projection_scores_zero(self, rng):
        z = rng.normal(size=(30, 3))
        z[:, 2] = 5.0
        scorer = FisherScorer()

        with pytest.warns(DegenerateClusterWarning):
            score = scorer.score(z, np.array([0.0, 0.0, 1.0]))

        assert score == 0.0

    def test_perfect_split_is_very_large(self):
        projection = np.array([0.0] * 8 + [2.0] * 8)

        score = FisherScorer(n_init=3).score_projection(projection)

        assert score == pytest.approx(4.0 / FISHER_EPSILON)

    def test_outlier_only_split_scores_zero(self):
        projection = np.array([0.0] * 15 + [100.0])

        with pytest.warns(DegenerateClusterWarning):
            assert FisherScorer().score_projection(projection) == 0.0

    def test_split_score_reports_reason_without_warning(self):
        projection = np.array([0.0] * 15 + [100.0])

        with warnings.catch_warnings():
            warnings.simplefilter("error", DegenerateClusterWarning)
            score, reason = FisherScorer().split_score(projection)

        assert score == 0.0
        assert "cluster sizes" in reason

    def test_split_score_of_proper_split_has_no_reason(self):
        projection = np.array([0.0, 0.1, 0.2, 5.0, 5.1, 5.2])

        score, reason = FisherScorer(n_init=3).split_score(projection)

        assert reason is None
        assert score > 100.0

    def test_same_seed_same_score(self, correlated_pixels):
        z, _ = whiten(correlated_pixels)
        direction = np.array([0.6, 0.0, 0.8])

        first = FisherScorer(n_init=1, random_seed=3).score(z, direction, index=17)
        second = FisherScorer(n_init=1, random_seed=3).score(z, direction, index=17)

        assert first == second


class TestDirectionSeed:

    def test_deterministic(self):
        assert direction_seed(42, 10) == direction_seed(42, 10)

    def test_depends_on_index_and_seed(self):
        assert direction_seed(42, 10) != direction_seed(42, 11)
        assert direction_seed(42, 10) != direction_seed(43, 10)

    def test_none_means_unseeded(self):
        assert direction_seed(None, 5) is None

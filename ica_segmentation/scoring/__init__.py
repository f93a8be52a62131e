"""
Fisher Index scoring of candidate projection directions.
"""

from .fisher import FISHER_EPSILON, FisherScorer, fisher_index, direction_seed

__all__ = ['FISHER_EPSILON', 'FisherScorer', 'fisher_index', 'direction_seed']

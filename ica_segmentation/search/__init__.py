"""
Best-direction search over a DirectionSet, sequential or on a process pool.
"""

from .search import (
    SearchResult,
    BaseDirectionSearch,
    SequentialSearch,
    ParallelSearch,
    best_index,
    create_search,
)

__all__ = [
    'SearchResult',
    'BaseDirectionSearch',
    'SequentialSearch',
    'ParallelSearch',
    'best_index',
    'create_search',
]

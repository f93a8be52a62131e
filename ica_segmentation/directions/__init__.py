"""
Candidate direction grids for the projection search.
"""

from .sampler import DirectionSet, spherical_directions, circular_directions, UNIT_NORM_TOL

__all__ = ['DirectionSet', 'spherical_directions', 'circular_directions', 'UNIT_NORM_TOL']

"""
Projection pipeline: whitening, IC1/IC2/IC3 search and projection images.
"""

from .projection import ProjectionResult, find_optimal_projections, segment_projection

__all__ = ['ProjectionResult', 'find_optimal_projections', 'segment_projection']

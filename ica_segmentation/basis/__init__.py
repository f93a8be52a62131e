"""
Orthonormal basis construction around a first projection axis.
"""

from .orthogonal import OrthonormalBasis, orthogonal_complement, OrthogonalBasisBuilder

__all__ = ['OrthonormalBasis', 'orthogonal_complement', 'OrthogonalBasisBuilder']

"""
K-Means clustering module for splitting 1D projections into two groups.
"""

from .kmeans import KMeansConfig, KMeansResult, BaseKMeans, SklearnKMeans, as_feature_matrix

__all__ = ['KMeansConfig', 'KMeansResult', 'BaseKMeans', 'SklearnKMeans', 'as_feature_matrix']

"""Geodesic hierarchical clustering of latitude/longitude points.

Haversine distance matrix, complete-linkage dendrogram, a cut at a fixed
distance threshold in meters, and arithmetic-mean centroids per cluster.
"""

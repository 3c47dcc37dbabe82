"""Pipeline around the clustering core for incident hotspot mapping.

Loads incident CSVs, splits coordinate strings, filters to a bounding box,
partitions by year and quarter, clusters each partition, and writes
assignments, centroids, metrics and optional plots.
"""

"""
Difference engine.

Recursively subtracts polygonal subtrahends from a GeoJSON minuend of any
shape (bare geometries, Features, FeatureCollections, GeometryCollections).
"""

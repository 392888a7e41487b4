"""Service packages for MergeFlow."""

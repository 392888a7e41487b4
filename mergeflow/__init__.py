"""MergeFlow: spreadsheet-driven PDF mail merge."""

__version__ = "0.1.0"

"""Collect GitHub organization repository stats into a table and a CSV report."""

__version__ = "0.1.0"

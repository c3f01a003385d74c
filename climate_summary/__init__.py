"""
Climate Summary

Streaming aggregation of NOAA tab-delimited climate observations.
Parses, validates, and aggregates records into per-region statistics.
"""

__version__ = "0.1.0"

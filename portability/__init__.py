"""Lifecycle management for data portability jobs."""

__version__ = "0.1.0"

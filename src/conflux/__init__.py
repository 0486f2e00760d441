"""Conflux - walk through unresolved merge conflicts one at a time."""

__version__ = "0.1.0"

"""Reproducible label/value fixture generator with ground-truth aggregates."""

__version__ = "0.1.0"

"""Availability resolution and booking admission backend."""

__version__ = "0.1.0"

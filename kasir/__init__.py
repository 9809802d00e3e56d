"""Kasir: point-of-sale backend for a single store."""

__version__ = "0.1.0"

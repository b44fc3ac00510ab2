"""Dispatch confirmation board."""

__version__ = "0.1.0"

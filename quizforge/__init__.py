"""Adaptive quiz engine: verified question generation and mastery tracking."""

__version__ = "0.1.0"

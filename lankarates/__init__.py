"""Collect, store and serve the USD exchange rates published by Sri Lankan banks."""

__version__ = "1.0.0"

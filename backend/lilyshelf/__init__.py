"""Lily Shelf: a personal media catalogue service."""

__version__ = "0.1.0"

"""Refrigerated radiant-floor ice rink simulation."""

__version__ = "0.1.0"

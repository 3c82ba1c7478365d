"""Validation of plugin binary catalogs before publication."""

__version__ = "0.1.0"

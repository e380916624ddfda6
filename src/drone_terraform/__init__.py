"""Drone plugin running terraform commands."""

__version__ = "1.0.0"

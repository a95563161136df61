"""Installed application version, compared against GitHub releases."""
__version__ = "0.1.0"

"""Helpers for Immich: API calls, capture dates, stacking, path arguments and docker access."""

__version__ = "0.1.0"
"""Shared library for the shindo outlook.

HTTP client with retry and caching, a SQLite document store, Poisson
statistics, and report formatting helpers.
"""

__version__ = "0.1.0"

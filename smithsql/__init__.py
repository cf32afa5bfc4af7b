"""Seeded random SQL generation, threaded SQLite executor and statistics server."""

__version__ = "0.1.0"
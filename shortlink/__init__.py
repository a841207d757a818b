"""A URL shortener HTTP service on Flask with SQLite storage."""

__version__ = "0.1.0"
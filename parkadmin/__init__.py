"""Park Admin: content admin panel backend."""

__version__ = "0.1.0"

"""Hotel commercial insurance rating engine."""

__version__ = "0.1.0"

"""Community-association portal backend: data retention core."""

__version__ = "0.1.0"

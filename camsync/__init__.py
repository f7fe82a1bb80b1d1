"""Camera-to-disk media sync service."""

__version__ = "0.1.0"

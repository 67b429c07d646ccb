"""Point-of-sale checkout and sale finalization service."""

__version__ = "1.0.0"

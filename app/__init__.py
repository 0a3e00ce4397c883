"""Media embedding and asset materialization service."""

__version__ = "1.0.0"

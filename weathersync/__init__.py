"""Weather sync client: offline-resilient current weather and forecast."""

__version__ = "0.1.0"

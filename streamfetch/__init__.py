"""Storage layers, input routing, process commands and settings for streaming downloads."""

__version__ = "0.1.0"
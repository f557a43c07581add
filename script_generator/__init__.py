"""Arabic short-video script generation service."""

__version__ = "1.0.0"

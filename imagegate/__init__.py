"""Building blocks for an image-resizing HTTP service."""

__version__ = "0.1.0"
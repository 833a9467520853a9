"""breezy: keep one rolling draft release per branch up to date."""

__version__ = "0.3.0"

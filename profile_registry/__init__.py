"""Character profile registry: bone-transform profiles with an editing workflow."""

__version__ = "1.0.0"

"""Documents View: document metadata back office service."""

__version__ = "0.1.0"

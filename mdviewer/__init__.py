"""Local markdown documentation browser served over HTTP."""

__version__ = "0.1.0"

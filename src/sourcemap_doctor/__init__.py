"""Diagnose why an error event's stack trace does not resolve through source maps."""

__version__ = "0.1.0"

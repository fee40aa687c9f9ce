"""Consultation portal case service."""

__version__ = "1.0.0"

"""Voitheia: location-based help request matching service."""

__version__ = "0.1.0"

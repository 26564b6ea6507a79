"""Biathlon race event processing and result reports."""

__version__ = "0.1.0"
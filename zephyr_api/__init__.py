"""Zephyr API: compose, execute and recall HTTP requests."""

__version__ = "1.0.0"

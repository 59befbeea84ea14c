# This project was developed with assistance from AI tools.
"""Scholarship cycles HTTP API."""

__version__ = "0.1.0"

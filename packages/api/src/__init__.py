# This project was developed with assistance from AI tools.
"""Courier KYC API."""

__version__ = "0.1.0"

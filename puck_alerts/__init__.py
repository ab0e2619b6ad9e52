"""Live NHL game tracking and webhook notifications."""

__version__ = "0.1.0"

"""Concurrent real-estate listing search over uncooperative sources."""

__version__ = "0.1.0"

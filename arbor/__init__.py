"""Framed codecs over byte streams and a single-threaded asyncio runtime."""

__version__ = "0.1.0"

__all__ = ["codec", "framed", "runtime"]
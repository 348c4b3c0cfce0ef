"""
Adapters package for the Game Service.

Contains HTTP client wrappers for upstream dependencies. These adapters
encapsulate base URLs, request shapes, retry policies and the fallback
behaviour used when the dependency cannot be reached.
"""

from .random_client import RandomNumberClient

__all__ = ["RandomNumberClient"]

"""
Persistence package for the Game Service.

The relational store is the source of truth for played games. The store
wraps every statement in a retry policy for connection-class failures;
statement errors propagate untouched.
"""

from .postgres import ResultStore

__all__ = ["ResultStore"]

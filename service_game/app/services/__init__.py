"""
Application services for the Game Service.

- choices: choice catalogue and opponent resolution.
- play: play / reset / latest-results orchestration.
- result: the OperationResult envelope carrying expected failures.
"""

from .choices import RandomChoiceProvider
from .play import PlayService
from .result import ApplicationError, ApplicationErrorType, OperationResult

__all__ = [
    "ApplicationError",
    "ApplicationErrorType",
    "OperationResult",
    "PlayService",
    "RandomChoiceProvider",
]

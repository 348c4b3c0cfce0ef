"""
Operation result envelope for game services.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ApplicationErrorType(str, Enum):
    """Expected failures a caller maps to a response."""
    NOT_FOUND = "not_found"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"


@dataclass(frozen=True)
class ApplicationError:
    """Details of an expected failure."""
    kind: ApplicationErrorType
    message: Optional[str] = None


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of an operation whose failures are values, not exceptions.

    ``value`` may be present on a failed result; check ``succeeded`` first.
    """
    succeeded: bool
    value: Optional[T] = None
    error: Optional[ApplicationError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(succeeded=True, value=value)

    @classmethod
    def failure(cls, kind: ApplicationErrorType, message: Optional[str] = None) -> "OperationResult[T]":
        return cls(succeeded=False, error=ApplicationError(kind=kind, message=message))

"""Result pattern for explicit, non-raising error reporting.

Used where a failure is an expected outcome the caller branches on, such as
assembling a state manager from a builder. Two outcomes exist:
- Ok: Success with a value
- Err: Failure with error message, error code, and retryable flag
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Result(ABC, Generic[T]):
    """Base class for Result types."""

    @abstractmethod
    def is_ok(self) -> bool:
        """Return True if this is an Ok result."""
        pass

    @abstractmethod
    def is_err(self) -> bool:
        """Return True if this is an Err result."""
        pass

    @abstractmethod
    def unwrap(self) -> T:
        """Return the value from Ok, or raise ValueError.

        Raises:
            ValueError: If this is not an Ok result.
        """
        pass

    @abstractmethod
    def unwrap_or(self, default: T) -> T:
        """Return the value from Ok, or default otherwise."""
        pass


class Ok(Result[T]):
    """Success result containing a value."""

    def __init__(self, value: T):
        self._value = value

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self._value

    def unwrap_or(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Ok({self._value!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Ok):
            return False
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(("Ok", self._value))


class Err(Result[T]):
    """Error result containing error information."""

    def __init__(self, error: str, code: Optional[str] = None, retryable: bool = False):
        """Initialize Err with error information.

        Args:
            error: Error message describing what went wrong.
            code: Optional error code for categorization.
            retryable: Whether this error is retryable (default: False).
        """
        self.error = error
        self.code = code
        self.retryable = retryable

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise ValueError with error message."""
        raise ValueError(self.error)

    def unwrap_or(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        if self.code:
            return f"Err({self.error!r}, code={self.code!r}, retryable={self.retryable})"
        return f"Err({self.error!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Err):
            return False
        return (
            self.error == other.error
            and self.code == other.code
            and self.retryable == other.retryable
        )

    def __hash__(self) -> int:
        return hash(("Err", self.error, self.code, self.retryable))

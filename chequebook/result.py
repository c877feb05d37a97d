"""Result pattern for total operations in chequebook.

The value normalizers never raise: a cell that cannot be parsed still yields a
usable value. This module provides the Result class they return so that
callers can tell a parsed value apart from a defaulted one.
"""
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    A failed result may still carry a value: the fallback that was used in
    place of the input that could not be parsed.

    Attributes:
        success: Whether the input was parsed as-is.
        value: The parsed value, or the fallback on failure.
        error: Error message on failure, None on success.
        error_type: Category of the failure ("DEFAULTED" for fallbacks).

    Usage:
        # Success case
        return Result.ok(amount)

        # Defaulted case
        return Result.defaulted(0.0, "Not a number: 'abc'")

        # Checking result
        result = normalize_date(cell)
        if not result.success:
            log(result.error)
        loan_date = result.value
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def defaulted(cls, value: T, error: str) -> 'Result[T]':
        """Create a failure result carrying the fallback value.

        Args:
            value: The fallback used in place of the unparseable input.
            error: Description of why the input was not used.
        """
        return cls(success=False, value=value, error=error, error_type=ErrorType.DEFAULTED)

    @property
    def is_defaulted(self) -> bool:
        return self.error_type == ErrorType.DEFAULTED

    def __bool__(self) -> bool:
        """Allow using Result in boolean context."""
        return self.success

    def unwrap_or(self, default: Any) -> Any:
        """Get the value, or ``default`` if the input was not parsed."""
        return self.value if self.success else default


class ErrorType:
    """Standard error type constants."""
    DEFAULTED = "DEFAULTED"

"""
Result type shared by use cases.

Use cases never raise for business failures; they return ``Result`` and
let the API layer decide how to surface the error.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Error:
    """Business error with a stable machine-readable code"""

    code: str
    message: str
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class Result(Generic[T]):
    """Either a value or an Error, never both"""

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result holds an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result holds a value, not an error")
        return self._error

    def __repr__(self) -> str:
        if self.is_err():
            return f"Result.err({self._error.code})"
        return f"Result.ok({self._value!r})"


class Return:
    """Constructors for Result"""

    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)

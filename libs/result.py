"""
Result type shared by use cases.

Use cases return Result values instead of raising for expected failures;
routes inspect them and translate errors into HTTP responses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Expected failure with a stable machine-readable code"""

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class Result(Generic[T]):
    """Either a value or an Error, never both"""

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        if value is not None and error is not None:
            raise ValueError("Result cannot hold both a value and an error")
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Result is not an error")
        return self._error

    def __repr__(self) -> str:
        if self.is_err():
            return f"Result(error={self._error!r})"
        return f"Result(value={self._value!r})"


class Return:
    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)

"""
apps.core.results
=================

Explicit success/failure values for operations whose failures are expected
and handled by the caller (path decryption, navigation probes).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

_T = TypeVar("_T")
_U = TypeVar("_U")


@dataclass(frozen=True)
class Result(Generic[_T]):
    ok: bool
    value: Optional[_T] = None
    error: str = ""

    @classmethod
    def success(cls, value: _T) -> "Result[_T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "Result[_T]":
        return cls(ok=False, error=error or "unknown error")

    def map(self, func: Callable[[_T], _U]) -> "Result[_U]":
        if not self.ok:
            return Result.failure(self.error)
        return Result.success(func(self.value))  # type: ignore[arg-type]

    def unwrap_or(self, default: _T) -> _T:
        return self.value if self.ok else default  # type: ignore[return-value]

    def __bool__(self) -> bool:
        return self.ok

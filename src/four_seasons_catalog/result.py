from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one CMS read.

    Callers pick the degraded value explicitly with ``value_or`` instead of
    relying on a swallowed exception.
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    status: Optional[int] = None

    @classmethod
    def success(cls, value: T, status: Optional[int] = 200) -> "FetchResult[T]":
        return cls(ok=True, value=value, status=status)

    @classmethod
    def failure(cls, error: str, status: Optional[int] = None) -> "FetchResult[T]":
        return cls(ok=False, error=error, status=status)

    def value_or(self, default: Any) -> Any:
        if self.ok and self.value is not None:
            return self.value
        return default

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "value": self.value,
            "error": self.error,
            "status": self.status,
        }

"""Per-extractor result type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    parse_failure = "parse_failure"
    structural_mismatch = "structural_mismatch"


@dataclass(frozen=True)
class ExtractFailure:
    kind: FailureKind
    component: str
    path: str = ""
    reason: str = ""


@dataclass(frozen=True)
class ExtractResult(Generic[T]):
    """Either a value or the reason there is none."""

    value: Optional[T] = None
    failure: Optional[ExtractFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "ExtractResult[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        kind: FailureKind,
        component: str,
        path: str = "",
        reason: str = "",
    ) -> "ExtractResult[T]":
        return cls(failure=ExtractFailure(kind=kind, component=component, path=path, reason=reason))

    def unwrap_or_none(self) -> Optional[T]:
        return self.value if self.failure is None else None

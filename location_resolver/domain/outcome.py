"""Tagged result of a single source call.

The orchestrator wraps every source call into a SourceOutcome so its
fallback logic is a plain decision over values rather than nested
exception handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .models import SourceKind

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SourceOutcome(Generic[T]):
    """Either `ok(value)` or `err(reason)` for one source call.

    Attributes:
        source: The source that was called
        value: The returned value (ok only)
        error: Human-readable failure reason (err only)
        not_configured: True when the source was skipped for lack of settings
    """

    source: SourceKind
    value: Optional[T] = None
    error: Optional[str] = None
    not_configured: bool = False

    @classmethod
    def ok(cls, source: SourceKind, value: T) -> SourceOutcome[T]:
        return cls(source=source, value=value)

    @classmethod
    def err(
        cls, source: SourceKind, reason: str, not_configured: bool = False
    ) -> SourceOutcome[T]:
        return cls(source=source, error=reason, not_configured=not_configured)

    @property
    def is_ok(self) -> bool:
        return self.error is None

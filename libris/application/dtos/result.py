"""Outcome of a lifecycle operation: Ok(data, message) or Err(kind, message).

Lifecycle operations never raise to the transport layer; they return one of
these and the HTTP boundary maps it to the response envelope once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from libris.domain.enums import ErrorKind


@dataclass(frozen=True)
class Ok:
    """Successful outcome. created=True marks operations that created a resource."""

    message: str
    data: dict[str, Any] = field(default_factory=dict)
    created: bool = False

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome with its category and a user-actionable message."""

    kind: ErrorKind
    message: str
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False


Result = Ok | Err

"""AssertionResult: outcome of one predicate evaluated against a snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AssertionResult(BaseModel):
    """Pass/fail verdict with an echo of the query and structured details.

    `hint` is a human-readable explanation, set on failures (and on the
    "unknown assertion" fallback, which lists the supported forms).
    """

    passed: bool
    assertion: str
    details: dict[str, Any] = Field(default_factory=dict)
    hint: str | None = None


__all__ = ["AssertionResult"]

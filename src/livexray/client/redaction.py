"""Redaction and size capping applied before network data reaches the collector.

- Header names match the deny-list case-insensitively.
- Body field names match case-sensitively, at any nesting depth, inside
  mappings and lists.
- Every matched value becomes the fixed `REDACTED` marker, so redacting
  twice gives the same result as redacting once.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from livexray.core.config import REDACTED, XrayConfig

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def redact_headers(headers: Mapping[str, str], deny: Iterable[str]) -> dict[str, str]:
    """Copy ``headers`` with deny-listed names replaced by the marker."""
    lowered = {name.lower() for name in deny}
    return {
        key: (REDACTED if key.lower() in lowered else value) for key, value in headers.items()
    }


def redact_body_fields(body: Any, deny: Iterable[str]) -> Any:
    """Recursively replace deny-listed field values in a parsed body."""
    fields = deny if isinstance(deny, set | frozenset) else frozenset(deny)
    if isinstance(body, Mapping):
        return {
            key: (REDACTED if key in fields else redact_body_fields(value, fields))
            for key, value in body.items()
        }
    if isinstance(body, list):
        return [redact_body_fields(item, fields) for item in body]
    return body


def capture_body(
    text: str, config: XrayConfig, content_type: str = ""
) -> tuple[Any, bool]:
    """Return ``(captured_body, truncated)`` for a textual body.

    Oversized bodies are cut to ``max_body_size`` characters and kept as raw
    text (they can not be parsed for redaction). JSON bodies are parsed and
    redacted; form-encoded bodies become a redacted field mapping; anything
    else is kept as text.
    """
    if len(text) > config.max_body_size:
        return text[: config.max_body_size], True

    if FORM_CONTENT_TYPE in content_type:
        form = dict(parse_qsl(text, keep_blank_values=True))
        return redact_body_fields(form, config.redact_body_fields), False

    try:
        parsed = json.loads(text)
    except ValueError:
        return text, False
    return redact_body_fields(parsed, config.redact_body_fields), False


__all__ = ["FORM_CONTENT_TYPE", "redact_headers", "redact_body_fields", "capture_body"]

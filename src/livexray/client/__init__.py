"""Client runtime: capture interceptors, capability table and push/poll agent."""

from __future__ import annotations

from .capabilities import Action, RuntimeCapabilities
from .interceptors import setup_interceptors
from .redaction import capture_body, redact_body_fields, redact_headers
from .runtime import XrayClient

__all__ = [
    "Action",
    "RuntimeCapabilities",
    "setup_interceptors",
    "capture_body",
    "redact_body_fields",
    "redact_headers",
    "XrayClient",
]

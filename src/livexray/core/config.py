"""Runtime options for the collector and the capture interceptors.

`XrayConfig` is the in-process counterpart of the env-driven `Settings`: the
client runtime builds one (usually via `Settings.xray_config()`) and hands it
to the `Collector` and to `setup_interceptors`. Tests construct it directly.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

REDACTED = "[REDACTED]"
SECRET_HEADER = "X-Xray-Secret"

DEFAULT_REDACT_HEADERS: tuple[str, ...] = ("authorization", "cookie", "set-cookie", "x-api-key")
DEFAULT_REDACT_BODY_FIELDS: tuple[str, ...] = ("password", "token", "secret", "apiKey", "api_key")


class XrayConfig(BaseModel):
    """Buffer caps, capture switches and redaction deny-lists.

    Header names are matched case-insensitively; body field names are matched
    case-sensitively at every nesting depth.
    """

    model_config = ConfigDict(frozen=True)

    max_console_entries: int = Field(default=100, ge=1)
    max_network_entries: int = Field(default=50, ge=1)
    max_errors: int = Field(default=50, ge=1)
    # Warnings mirror console warns under their own cap (same size as errors).
    max_warnings: int | None = Field(default=None, ge=1)

    capture_headers: bool = True
    capture_bodies: bool = False
    max_body_size: int = Field(default=10240, ge=0)
    redact_headers: tuple[str, ...] = DEFAULT_REDACT_HEADERS
    redact_body_fields: tuple[str, ...] = DEFAULT_REDACT_BODY_FIELDS

    # URL prefixes whose traffic is never recorded (the bridge's own host).
    ignore_urls: tuple[str, ...] = ()

    warn_on_unknown_network_update: bool = False

    @property
    def warnings_cap(self) -> int:
        """Effective cap of the warnings mirror buffer."""
        return self.max_warnings if self.max_warnings is not None else self.max_errors


__all__ = [
    "REDACTED",
    "SECRET_HEADER",
    "DEFAULT_REDACT_HEADERS",
    "DEFAULT_REDACT_BODY_FIELDS",
    "XrayConfig",
]

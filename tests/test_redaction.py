"""Tests for header/body redaction and body capture limits."""

from __future__ import annotations

from livexray.client.redaction import capture_body, redact_body_fields, redact_headers
from livexray.core.config import DEFAULT_REDACT_BODY_FIELDS, REDACTED, XrayConfig


def test_header_names_match_case_insensitively() -> None:
    headers = {"Authorization": "Bearer x", "COOKIE": "sid=1", "Accept": "text/html"}
    out = redact_headers(headers, ["authorization", "Cookie"])
    assert out == {"Authorization": REDACTED, "COOKIE": REDACTED, "Accept": "text/html"}


def test_same_header_in_any_casing_gets_same_marker() -> None:
    deny = ["x-api-key"]
    variants = ["x-api-key", "X-API-KEY", "X-Api-Key"]
    assert {redact_headers({v: "k"}, deny)[v] for v in variants} == {REDACTED}


def test_body_fields_redacted_at_every_depth() -> None:
    body = {
        "password": "p",
        "user": {"name": "ada", "password": "p2"},
        "sessions": [{"token": "t1"}, {"token": "t2", "scope": "read"}],
    }
    out = redact_body_fields(body, DEFAULT_REDACT_BODY_FIELDS)
    assert out == {
        "password": REDACTED,
        "user": {"name": "ada", "password": REDACTED},
        "sessions": [{"token": REDACTED}, {"token": REDACTED, "scope": "read"}],
    }
    # Input is left untouched.
    assert body["password"] == "p"


def test_body_field_names_are_case_sensitive() -> None:
    assert redact_body_fields({"Password": "p"}, ["password"]) == {"Password": "p"}


def test_redaction_is_idempotent() -> None:
    headers = {"Cookie": "a", "Accept": "b"}
    once = redact_headers(headers, ["cookie"])
    assert redact_headers(once, ["cookie"]) == once

    body = {"a": {"secret": 1}, "b": [{"secret": 2}]}
    once_body = redact_body_fields(body, ["secret"])
    assert redact_body_fields(once_body, ["secret"]) == once_body


def test_capture_body_parses_and_redacts_json() -> None:
    body, truncated = capture_body('{"user": "ada", "apiKey": "k"}', XrayConfig())
    assert body == {"user": "ada", "apiKey": REDACTED}
    assert truncated is False


def test_capture_body_keeps_plain_text() -> None:
    assert capture_body("hello", XrayConfig()) == ("hello", False)


def test_capture_body_redacts_form_fields() -> None:
    body, _ = capture_body(
        "user=ada&password=hunter2",
        XrayConfig(),
        content_type="application/x-www-form-urlencoded; charset=utf-8",
    )
    assert body == {"user": "ada", "password": REDACTED}


def test_capture_body_truncates_oversized_text() -> None:
    body, truncated = capture_body('{"password": "x"}', XrayConfig(max_body_size=5))
    assert body == '{"pas'
    assert truncated is True

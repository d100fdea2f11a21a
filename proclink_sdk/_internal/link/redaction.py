"""Redaction of sensitive values before they reach debug output."""

from typing import Any

import httpx

REDACT_KEYS: frozenset[str] = frozenset({
    "api_key",
    "token",
    "secret",
    "password",
    "access_key",
    "refresh_token",
    "authorization",
    "auth_token",
    "private_key",
    "secret_key",
    "credentials",
    "cookie",
    "set-cookie",
    "x-api-key",
})

REDACTED_VALUE = "[REDACTED]"


def redact(value: Any) -> Any:
    """Return a copy of an operation input with sensitive keys masked.

    Lists and nested objects are walked; the original value is never mutated.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED_VALUE
            if isinstance(key, str) and key.lower() in REDACT_KEYS
            else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def redact_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Header lines as (name, value) pairs, sensitive values masked."""
    return [
        (name, REDACTED_VALUE if name.lower() in REDACT_KEYS else value)
        for name, value in headers.multi_items()
    ]

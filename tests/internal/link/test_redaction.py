"""Tests for redaction of debug output."""

import httpx

from proclink_sdk._internal.link.redaction import REDACTED_VALUE, redact, redact_headers


class TestRedact:
    """Tests for redact."""

    def test_masks_sensitive_keys(self):
        """Should replace sensitive values."""
        result = redact({"password": "hunter2", "name": "alice"})
        assert result == {"password": REDACTED_VALUE, "name": "alice"}

    def test_case_insensitive(self):
        """Key matching should ignore case."""
        assert redact({"API_KEY": "x"}) == {"API_KEY": REDACTED_VALUE}

    def test_nested(self):
        """Should walk nested objects and lists."""
        result = redact({"users": [{"token": "t", "id": 1}], "meta": {"secret": "s"}})
        assert result == {
            "users": [{"token": REDACTED_VALUE, "id": 1}],
            "meta": {"secret": REDACTED_VALUE},
        }

    def test_does_not_mutate(self):
        """Should leave the original untouched."""
        original = {"token": "t", "inner": {"password": "p"}}
        redact(original)
        assert original == {"token": "t", "inner": {"password": "p"}}

    def test_scalars_pass_through(self):
        """Non-container inputs are returned as-is."""
        assert redact(1) == 1
        assert redact("token") == "token"
        assert redact(None) is None


class TestRedactHeaders:
    """Tests for redact_headers."""

    def test_masks_authorization(self):
        """Should mask sensitive header values and keep the rest."""
        headers = httpx.Headers([("Authorization", "Bearer abc"), ("X-App", "demo")])
        assert [(name.lower(), value) for name, value in redact_headers(headers)] == [
            ("authorization", REDACTED_VALUE),
            ("x-app", "demo"),
        ]

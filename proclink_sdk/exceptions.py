"""Public exceptions for the Proclink SDK."""

from typing import Any

INTERNAL_SERVER_ERROR = "InternalServerError"


class ProclinkError(Exception):
    """Base exception for all Proclink SDK errors."""


class ProtocolError(ProclinkError):
    """Error delivered to a caller's reject callback.

    Either a transport/protocol violation (code ``InternalServerError``) or an
    application error forwarded verbatim from the server's response envelope.
    """

    def __init__(self, code: str, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    @classmethod
    def internal(cls, message: str) -> "ProtocolError":
        """Build an ``InternalServerError`` with the given message."""
        return cls(INTERNAL_SERVER_ERROR, message)

    @property
    def is_internal(self) -> bool:
        return self.code == INTERNAL_SERVER_ERROR

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"ProtocolError(code={self.code!r}, message={self.message!r})"


class UnsupportedOperationError(ProclinkError):
    """Operation kind the link cannot carry (subscriptions over HTTP)."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ProclinkConfigError(ProclinkError):
    """Configuration error (missing env vars, invalid options)."""

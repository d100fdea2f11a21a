"""Pydantic models for link operations and their wire formats.

Request items, response envelopes and transport outcomes all pass through
these models so the rest of the link never inspects raw dicts.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StrictInt, ValidationError

from proclink_sdk.exceptions import INTERNAL_SERVER_ERROR, ProtocolError

# =============================================================================
# Constants
# =============================================================================

BATCH_PATH = "_batch"
JSON_CONTENT_TYPE = "application/json"

OperationMethod = Literal["query", "mutation", "subscription"]

# =============================================================================
# Operation
# =============================================================================


class Operation(BaseModel):
    """One logical remote call.

    Required fields:
        path: Procedure path on the server (e.g. 'users.get')
        method: One of 'query', 'mutation', 'subscription'

    Optional fields:
        input: Opaque, JSON-serializable argument
        context: Caller-defined value, never sent over the wire
    """

    model_config = {"frozen": True}

    path: str = Field(min_length=1)
    method: OperationMethod
    input: Any = None
    context: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Serializable form of the operation with ``context`` stripped."""
        wire: dict[str, Any] = {"path": self.path, "method": self.method}
        if self.input is not None:
            wire["input"] = self.input
        return wire


# =============================================================================
# Wire Models
# =============================================================================


class BatchRequestItem(BaseModel):
    """One entry of a ``_batch`` request body."""

    id: int = Field(ge=0)
    path: str
    method: OperationMethod
    input: Any = None

    @classmethod
    def from_operation(cls, correlation_id: int, operation: Operation) -> "BatchRequestItem":
        return cls(id=correlation_id, **operation.to_wire())

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"id": self.id, "path": self.path, "method": self.method}
        if self.input is not None:
            wire["input"] = self.input
        return wire


class BatchResponseItem(BaseModel):
    """One entry of a ``_batch`` response body.

    Everything besides ``id`` is the item's envelope (success value or error).
    """

    model_config = {"extra": "allow"}

    id: StrictInt

    def envelope(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class ErrorBody(BaseModel):
    """Structured application error returned inside a valid JSON envelope."""

    model_config = {"extra": "allow"}

    code: str
    message: str


# =============================================================================
# Transport Outcomes
# =============================================================================


class SuccessOutcome(BaseModel):
    kind: Literal["success"] = "success"
    value: Any = None


class ErrorOutcome(BaseModel):
    kind: Literal["error"] = "error"
    code: str
    message: str
    data: Any = None

    @classmethod
    def internal(cls, message: str) -> "ErrorOutcome":
        return cls(code=INTERNAL_SERVER_ERROR, message=message)

    def to_exception(self) -> ProtocolError:
        return ProtocolError(self.code, self.message, self.data)


class CancelledOutcome(BaseModel):
    kind: Literal["cancelled"] = "cancelled"


TransportOutcome = Annotated[
    SuccessOutcome | ErrorOutcome | CancelledOutcome,
    Field(discriminator="kind"),
]


def decode_envelope(body: Any) -> SuccessOutcome | ErrorOutcome:
    """Split a decoded response body into a success value or an application error.

    A JSON object carrying a ``code`` key is an error envelope; anything else
    is the caller-defined success value.
    """
    if isinstance(body, dict) and "code" in body:
        try:
            error = ErrorBody.model_validate(body)
        except ValidationError:
            return ErrorOutcome.internal("server responded with malformed error")
        return ErrorOutcome(code=error.code, message=error.message, data=body)
    return SuccessOutcome(value=body)

"""Transport executor: one physical HTTP exchange, classified."""

import asyncio
import json
from collections.abc import Callable, Sequence
from typing import Any, Literal
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from proclink_sdk._internal.link.models import (
    BATCH_PATH,
    JSON_CONTENT_TYPE,
    BatchRequestItem,
    CancelledOutcome,
    ErrorOutcome,
    Operation,
    SuccessOutcome,
    decode_envelope,
)
from proclink_sdk._internal.link.pending import CancellationToken

NON_200_MESSAGE = "server responded with non-200 status"
NON_JSON_MESSAGE = "server responded with non-json response"
INVALID_JSON_MESSAGE = "server responded with invalid-json response"
TIMEOUT_MESSAGE = "server request timed out"


class RequestSpec(BaseModel):
    """Everything needed for one physical request except its URL."""

    model_config = {"arbitrary_types_allowed": True}

    method: Literal["GET", "POST"]
    headers: httpx.Headers
    params: dict[str, str] | None = None
    content: bytes | None = None


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def encode_path(path: str) -> str:
    """Percent-encode a procedure path into a single URL segment."""
    return quote(path, safe="!~*'()")


def build_operation_request(
    operation: Operation, headers: httpx.Headers
) -> tuple[str, RequestSpec]:
    """Relative URL and request spec for a non-batched operation.

    Queries are sent as GET with the input JSON-encoded in the ``input`` URL
    parameter; mutations are sent as POST with a JSON body.
    """
    path = encode_path(operation.path)
    if operation.method == "mutation":
        headers["Content-Type"] = JSON_CONTENT_TYPE
        body = operation.input if operation.input is not None else {}
        return path, RequestSpec(
            method="POST",
            headers=headers,
            content=dump_json(body).encode("utf-8"),
        )

    params = None
    if operation.input is not None:
        params = {"input": dump_json(operation.input)}
    return path, RequestSpec(method="GET", headers=headers, params=params)


def build_batch_request(
    items: Sequence[BatchRequestItem], headers: httpx.Headers
) -> tuple[str, RequestSpec]:
    """Relative URL and request spec for a ``_batch`` POST."""
    headers["Content-Type"] = JSON_CONTENT_TYPE
    body = [item.to_wire() for item in items]
    return BATCH_PATH, RequestSpec(
        method="POST",
        headers=headers,
        content=dump_json(body).encode("utf-8"),
    )


class TransportExecutor:
    """Performs one HTTP exchange and classifies its result.

    ``send`` never raises for transport problems: every failure becomes an
    ``ErrorOutcome`` with code ``InternalServerError``, and a call whose token
    was cancelled becomes ``CancelledOutcome`` whatever the server returned.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        log_debug: Callable[[str], None] | None = None,
    ) -> None:
        self._client = client
        self._log_debug = log_debug or (lambda message: None)

    async def send(
        self,
        url: str,
        spec: RequestSpec,
        token: CancellationToken | None = None,
    ) -> SuccessOutcome | ErrorOutcome | CancelledOutcome:
        """Send one request.

        Args:
            url: Absolute request URL.
            spec: Method, headers, params and body.
            token: Cancellation token of the call; None for shared batch requests.

        Returns:
            The classified transport outcome.
        """
        self._log_debug(f"{spec.method} {url}")
        try:
            response = await self._client.request(
                spec.method,
                url,
                params=spec.params,
                content=spec.content,
                headers=spec.headers,
            )
        except asyncio.CancelledError:
            if token is not None and token.cancelled:
                self._log_debug(f"Request aborted: {url}")
                return CancelledOutcome()
            raise
        except httpx.TimeoutException:
            self._log_debug(f"Request timed out: {url}")
            return ErrorOutcome.internal(TIMEOUT_MESSAGE)
        except httpx.RequestError as e:
            self._log_debug(f"Request error: {e}")
            return ErrorOutcome.internal(f"server request failed: {e}")
        except Exception as e:
            self._log_debug(f"Unexpected request failure: {e!r}")
            return ErrorOutcome.internal(f"server request failed: {e}")

        if token is not None and token.cancelled:
            return CancelledOutcome()

        if response.status_code != 200:
            self._log_debug(f"Request failed with status {response.status_code}")
            return ErrorOutcome.internal(NON_200_MESSAGE)

        if response.headers.get("Content-Type") != JSON_CONTENT_TYPE:
            self._log_debug(
                f"Unexpected content type: {response.headers.get('Content-Type')!r}"
            )
            return ErrorOutcome.internal(NON_JSON_MESSAGE)

        try:
            body = response.json()
        except ValueError:
            self._log_debug("Response body is not valid JSON")
            return ErrorOutcome.internal(INVALID_JSON_MESSAGE)

        return decode_envelope(body)

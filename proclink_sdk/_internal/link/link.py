"""HTTP link: the dispatch entry point for operations."""

import asyncio
import os
import sys
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, Field, field_validator

from proclink_sdk._internal.http import DEFAULT_TIMEOUT_MS, create_http_client
from proclink_sdk._internal.link.batch import BatchAggregator
from proclink_sdk._internal.link.headers import HeaderMap, create_header_resolver
from proclink_sdk._internal.link.models import Operation
from proclink_sdk._internal.link.pending import (
    CancellationHandle,
    CancellationToken,
    PendingCall,
    RejectCallback,
    ResolveCallback,
)
from proclink_sdk._internal.link.redaction import redact, redact_headers
from proclink_sdk._internal.link.transport import (
    RequestSpec,
    TransportExecutor,
    build_operation_request,
)
from proclink_sdk.exceptions import (
    ProclinkConfigError,
    ProtocolError,
    UnsupportedOperationError,
)

# =============================================================================
# Options
# =============================================================================


class BatchOptions(BaseModel):
    """Batching options.

    Optional fields:
        should_batch: Predicate deciding per operation whether it joins the
            batch; operations it rejects are sent on their own. A False
            result is honoured, unlike a `shouldBatch?.(op) || true` check
            that batches every operation regardless of the predicate.
        max_batch_size: Upper bound on operations per physical request.
    """

    model_config = {"arbitrary_types_allowed": True}

    should_batch: Callable[[Operation], bool] | None = None
    max_batch_size: int | None = Field(default=None, ge=1)


class LinkOptions(BaseModel):
    """Configuration for ``HttpLink``.

    Required fields:
        url: Base endpoint; a trailing slash is added if missing

    Optional fields:
        batch: False, True, or BatchOptions (default: False)
        headers: Static header mapping, or a function of the operation
            (non-batched) or of the operation list (batched)
        http_client: httpx.AsyncClient to send with instead of an owned one
        cancellation_factory: Callable producing a fresh CancellationToken
        timeout_ms: Timeout of the owned client in milliseconds
        debug: Enable debug logging to stderr
    """

    model_config = {"arbitrary_types_allowed": True}

    url: str = Field(min_length=1)
    batch: bool | BatchOptions = False
    headers: HeaderMap | Callable[..., Any] | None = None
    http_client: httpx.AsyncClient | None = None
    cancellation_factory: Callable[[], CancellationToken] = CancellationToken
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    debug: bool = False

    @field_validator("url")
    @classmethod
    def url_trailing_slash(cls, v: str) -> str:
        return v if v.endswith("/") else v + "/"

    @property
    def batched(self) -> bool:
        return self.batch is not False

    @classmethod
    def from_env(cls, **overrides: Any) -> "LinkOptions":
        """Create link options from environment variables.

        Required environment variables:
            PROCLINK_URL: Base endpoint URL.

        Optional environment variables:
            PROCLINK_BATCH: Set to "1" to enable batching.
            PROCLINK_MAX_BATCH_SIZE: Maximum operations per batch request.
            PROCLINK_TIMEOUT_MS: Request timeout in milliseconds.
            PROCLINK_DEBUG: Set to "1" to enable debug logging.

        Args:
            **overrides: Options that cannot come from the environment
                (headers, http_client, ...) or that should win over it.

        Raises:
            ProclinkConfigError: If PROCLINK_URL is missing.
            ValueError: If a numeric variable is not a valid integer.
        """
        env: dict[str, Any] = {}

        url = os.environ.get("PROCLINK_URL")
        if url:
            env["url"] = url

        batch: bool | BatchOptions = os.environ.get("PROCLINK_BATCH", "") == "1"
        max_batch_size = os.environ.get("PROCLINK_MAX_BATCH_SIZE")
        if batch and max_batch_size:
            batch = BatchOptions(max_batch_size=int(max_batch_size))
        env["batch"] = batch

        env["timeout_ms"] = int(os.environ.get("PROCLINK_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)))
        env["debug"] = os.environ.get("PROCLINK_DEBUG", "") == "1"

        env.update(overrides)
        if not env.get("url"):
            raise ProclinkConfigError("PROCLINK_URL is not set")
        return cls(**env)


# =============================================================================
# Link
# =============================================================================


class HttpLink:
    """Dispatches operations over HTTP, one request each or batched.

    ``dispatch`` must be called from a running event loop. Results come back
    only through the resolve/reject callbacks, each call firing at most one of
    them, and a cancelled call firing neither.

    Use ``HttpLink.from_env()`` to configure the link from environment variables.
    """

    def __init__(self, options: LinkOptions | None = None, **kwargs: Any) -> None:
        """Initialize the link.

        Args:
            options: Link options. If omitted, built from ``kwargs``.
            **kwargs: Fields of LinkOptions.
        """
        self._options = options if options is not None else LinkOptions(**kwargs)
        self._debug = self._options.debug
        self._url = self._options.url
        self._owns_client = self._options.http_client is None
        self._client = self._options.http_client or create_http_client(
            timeout_ms=self._options.timeout_ms
        )
        self._headers = create_header_resolver(
            self._options.headers, batched=self._options.batched
        )
        self._executor = TransportExecutor(self._client, log_debug=self._log_debug)
        self._tasks: set[asyncio.Task[None]] = set()

        self._aggregator: BatchAggregator | None = None
        self._should_batch: Callable[[Operation], bool] | None = None
        if self._options.batched:
            batch = self._options.batch
            max_batch_size = None
            if isinstance(batch, BatchOptions):
                self._should_batch = batch.should_batch
                max_batch_size = batch.max_batch_size
            self._aggregator = BatchAggregator(
                self._executor,
                self._url,
                self._headers,
                max_batch_size=max_batch_size,
                log_debug=self._log_debug,
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> "HttpLink":
        """Create a link from environment variables (see ``LinkOptions.from_env``)."""
        return cls(LinkOptions.from_env(**overrides))

    @property
    def url(self) -> str:
        return self._url

    @property
    def batched(self) -> bool:
        return self._aggregator is not None

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[proclink-sdk] {message}", file=sys.stderr)

    def dispatch(
        self,
        operation: Operation,
        resolve: ResolveCallback,
        reject: RejectCallback,
    ) -> CancellationHandle:
        """Send one operation and route its result to resolve or reject.

        Subscriptions are rejected synchronously without touching the network.

        Args:
            operation: The operation to send.
            resolve: Called with the decoded success value.
            reject: Called with a ProclinkError subclass.

        Returns:
            A handle whose ``cancel()`` suppresses both callbacks and, for a
            non-batched call, aborts the request.
        """
        token = self._options.cancellation_factory()
        handle = CancellationHandle(token)

        if operation.method == "subscription":
            self._log_debug(f"Rejecting subscription '{operation.path}'")
            reject(
                UnsupportedOperationError(
                    f"Subscribing to '{operation.path}' failed as the HTTP transport "
                    "does not support subscriptions! Maybe try using the websocket transport?",
                    path=operation.path,
                )
            )
            return handle

        self._log_debug(
            f"Dispatching {operation.method} '{operation.path}' "
            f"input={redact(operation.input)!r}"
        )
        call = PendingCall(operation, resolve, reject, token)
        if self._aggregator is not None and self._joins_batch(operation):
            self._aggregator.enqueue(call)
        else:
            self._send_immediate(call)
        return handle

    def _joins_batch(self, operation: Operation) -> bool:
        if self._should_batch is None:
            return True
        return bool(self._should_batch(operation))

    def _send_immediate(self, call: PendingCall) -> None:
        try:
            headers = self._headers.for_operation(call.operation)
            path, spec = build_operation_request(call.operation, headers)
        except Exception as e:
            self._log_debug(f"Failed to build request for '{call.operation.path}': {e}")
            call.reject(ProtocolError.internal(f"failed to build request: {e}"))
            return
        if self._debug:
            self._log_debug(f"Headers: {redact_headers(spec.headers)}")

        task = asyncio.get_running_loop().create_task(
            self._execute(self._url + path, spec, call)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        call.token.add_callback(task.cancel)

    async def _execute(self, url: str, spec: RequestSpec, call: PendingCall) -> None:
        outcome = await self._executor.send(url, spec, call.token)
        if not call.deliver(outcome) and call.cancelled:
            self._log_debug(f"Dropped result of cancelled call '{call.operation.path}'")

    async def aclose(self) -> None:
        """Close the HTTP client if the link created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpLink":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

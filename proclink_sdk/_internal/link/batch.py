"""Batch aggregator: coalesces calls from one loop turn into one request."""

import asyncio
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from proclink_sdk._internal.link.headers import HeaderResolver
from proclink_sdk._internal.link.models import (
    BatchRequestItem,
    BatchResponseItem,
    ErrorOutcome,
    SuccessOutcome,
    decode_envelope,
)
from proclink_sdk._internal.link.pending import PendingCall
from proclink_sdk._internal.link.transport import TransportExecutor, build_batch_request
from proclink_sdk.exceptions import ProtocolError

LENGTH_MISMATCH_MESSAGE = "batch response length mismatch"
MISSING_ITEM_MESSAGE = "batch response missing item"
INVALID_BATCH_MESSAGE = "server responded with non-array batch response"


class BatchAggregator:
    """Collects pending calls and flushes them as one ``_batch`` request.

    The first enqueue into an empty batch schedules a single flush on the
    next event-loop turn. Each physical request gets its own correlation map
    with ids counting up from 0; responses are matched by id only.
    """

    def __init__(
        self,
        executor: TransportExecutor,
        url: str,
        headers: HeaderResolver,
        *,
        max_batch_size: int | None = None,
        log_debug: Callable[[str], None] | None = None,
    ) -> None:
        self._executor = executor
        self._url = url
        self._headers = headers
        self._max_batch_size = max_batch_size
        self._log_debug = log_debug or (lambda message: None)
        self._pending: list[PendingCall] = []
        self._flush_scheduled = False
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def enqueue(self, call: PendingCall) -> None:
        """Add a call to the current batch, scheduling a flush if needed."""
        self._pending.append(call)
        call.token.add_callback(lambda: self._discard(call))
        if not self._flush_scheduled:
            self._flush_scheduled = True
            asyncio.get_running_loop().call_soon(self.flush)

    def _discard(self, call: PendingCall) -> None:
        try:
            self._pending.remove(call)
        except ValueError:
            # Already flushed; its response item will be dropped on arrival.
            return
        self._log_debug(f"Removed cancelled call '{call.operation.path}' from batch")

    def flush(self) -> list[asyncio.Task[None]]:
        """Hand the current batch to the network and start a fresh one.

        Returns:
            One task per physical request issued.
        """
        batch, self._pending = self._pending, []
        self._flush_scheduled = False
        if not batch:
            return []

        loop = asyncio.get_running_loop()
        tasks = []
        for chunk in self._chunks(batch):
            self._log_debug(f"Flushing batch of {len(chunk)} operation(s)")
            task = loop.create_task(self._send(chunk))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        return tasks

    def _chunks(self, batch: list[PendingCall]) -> list[list[PendingCall]]:
        if not self._max_batch_size:
            return [batch]
        size = self._max_batch_size
        return [batch[start : start + size] for start in range(0, len(batch), size)]

    async def _send(self, batch: list[PendingCall]) -> None:
        correlation: dict[int, PendingCall] = {}
        items: list[BatchRequestItem] = []
        for correlation_id, call in enumerate(batch):
            correlation[correlation_id] = call
            items.append(BatchRequestItem.from_operation(correlation_id, call.operation))

        try:
            headers = self._headers.for_batch([call.operation for call in batch])
            path, spec = build_batch_request(items, headers)
        except Exception as e:
            self._log_debug(f"Failed to build batch request: {e}")
            self._reject_all(batch, ProtocolError.internal(f"failed to build request: {e}"))
            return

        outcome = await self._executor.send(self._url + path, spec)
        if isinstance(outcome, ErrorOutcome):
            self._reject_all(batch, outcome.to_exception())
        elif isinstance(outcome, SuccessOutcome):
            self._demultiplex(correlation, outcome.value)

    def _demultiplex(self, correlation: dict[int, PendingCall], body: Any) -> None:
        calls = list(correlation.values())
        if not isinstance(body, list):
            self._log_debug(f"Batch response is not an array: {type(body).__name__}")
            self._reject_all(calls, ProtocolError.internal(INVALID_BATCH_MESSAGE))
            return

        if len(body) != len(correlation):
            self._log_debug(
                f"Batch response length mismatch: sent {len(correlation)}, got {len(body)}"
            )
            self._reject_all(calls, ProtocolError.internal(LENGTH_MISMATCH_MESSAGE))
            return

        for raw in body:
            try:
                item = BatchResponseItem.model_validate(raw)
            except ValidationError:
                self._log_debug(f"Ignoring batch item without integer id: {raw!r}")
                continue

            call = correlation.pop(item.id, None)
            if call is None:
                self._log_debug(f"Ignoring batch item with unknown id {item.id}")
                continue
            if call.cancelled:
                self._log_debug(f"Dropping response for cancelled call {item.id}")
                continue
            call.deliver(decode_envelope(item.envelope()))

        for correlation_id, call in correlation.items():
            self._log_debug(f"No batch response item for id {correlation_id}")
            call.reject(ProtocolError.internal(MISSING_ITEM_MESSAGE))

    def _reject_all(self, calls: list[PendingCall], error: Exception) -> None:
        for call in calls:
            call.reject(error)

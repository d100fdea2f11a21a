"""Cancellation primitives and the per-invocation pending call."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from proclink_sdk._internal.link.models import (
    CancelledOutcome,
    ErrorOutcome,
    Operation,
    SuccessOutcome,
)

ResolveCallback = Callable[[Any], None]
RejectCallback = Callable[[Exception], None]


class CancellationToken:
    """Cooperative, one-way cancellation signal.

    Callbacks registered with ``add_callback`` run once, synchronously, when
    the token is first cancelled (or immediately if it already is).
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)


class CancellationHandle:
    """Returned by ``HttpLink.dispatch``; ``cancel()`` signals the call's token."""

    def __init__(self, token: CancellationToken) -> None:
        self._token = token

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def cancel(self) -> None:
        self._token.cancel()


@dataclass(eq=False)
class PendingCall:
    """One dispatched operation awaiting its single resolve/reject.

    resolve/reject fire at most once, and never after the token is cancelled.
    """

    operation: Operation
    on_resolve: ResolveCallback
    on_reject: RejectCallback
    token: CancellationToken
    _settled: bool = field(default=False, init=False, repr=False)

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def resolve(self, value: Any) -> bool:
        if self._settled or self.token.cancelled:
            return False
        self._settled = True
        self.on_resolve(value)
        return True

    def reject(self, error: Exception) -> bool:
        if self._settled or self.token.cancelled:
            return False
        self._settled = True
        self.on_reject(error)
        return True

    def deliver(self, outcome: SuccessOutcome | ErrorOutcome | CancelledOutcome) -> bool:
        """Route a transport outcome to resolve, reject, or nowhere."""
        if isinstance(outcome, SuccessOutcome):
            return self.resolve(outcome.value)
        if isinstance(outcome, ErrorOutcome):
            return self.reject(outcome.to_exception())
        return False

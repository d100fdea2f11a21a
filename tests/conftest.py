"""Shared fixtures for the test suite."""

import asyncio
from typing import Any

import pytest


class CallRecorder:
    """Collects resolve/reject invocations for one dispatched call."""

    def __init__(self) -> None:
        self.resolved: list[Any] = []
        self.rejected: list[Exception] = []
        self._done = asyncio.get_running_loop().create_future()

    @property
    def calls(self) -> int:
        return len(self.resolved) + len(self.rejected)

    def resolve(self, value: Any) -> None:
        self.resolved.append(value)
        if not self._done.done():
            self._done.set_result(None)

    def reject(self, error: Exception) -> None:
        self.rejected.append(error)
        if not self._done.done():
            self._done.set_result(None)

    async def wait(self, timeout: float = 1.0) -> None:
        await asyncio.wait_for(asyncio.shield(self._done), timeout)


async def settle(turns: int = 5) -> None:
    """Let the event loop run a few turns."""
    for _ in range(turns):
        await asyncio.sleep(0)


@pytest.fixture
def recorder():
    """Factory for CallRecorder instances (must be used inside a running loop)."""
    return CallRecorder


@pytest.fixture
def run_loop():
    """Returns ``settle``: awaitable that lets pending loop callbacks run."""
    return settle

"""Awaitable client on top of ``HttpLink``.

Example:
    from proclink_sdk import ProclinkClient

    async with ProclinkClient.from_env() as client:
        user = await client.query("getUser", 1)
        await client.mutation("sendMsg", "Hello from the client!")
"""

import asyncio
from typing import Any

from proclink_sdk._internal.link.link import HttpLink, LinkOptions
from proclink_sdk._internal.link.models import Operation, OperationMethod


class ProclinkClient:
    """Turns link callbacks into awaitables.

    Cancelling the task awaiting a call cancels the call on the link, so its
    result is dropped (and a non-batched request is aborted).
    """

    def __init__(self, link: HttpLink) -> None:
        self._link = link

    @classmethod
    def from_env(cls, **overrides: Any) -> "ProclinkClient":
        """Create a client whose link is configured from environment variables."""
        return cls(HttpLink(LinkOptions.from_env(**overrides)))

    @property
    def link(self) -> HttpLink:
        return self._link

    async def query(self, path: str, input: Any = None, *, context: Any = None) -> Any:
        return await self._call("query", path, input, context)

    async def mutation(self, path: str, input: Any = None, *, context: Any = None) -> Any:
        return await self._call("mutation", path, input, context)

    async def subscription(self, path: str, input: Any = None, *, context: Any = None) -> Any:
        """Always raises UnsupportedOperationError; HTTP cannot stream."""
        return await self._call("subscription", path, input, context)

    async def _call(
        self, method: OperationMethod, path: str, input: Any, context: Any
    ) -> Any:
        operation = Operation(path=path, method=method, input=input, context=context)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def resolve(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        def reject(error: Exception) -> None:
            if not future.done():
                future.set_exception(error)

        handle = self._link.dispatch(operation, resolve, reject)
        try:
            return await future
        except asyncio.CancelledError:
            handle.cancel()
            raise

    async def aclose(self) -> None:
        await self._link.aclose()

    async def __aenter__(self) -> "ProclinkClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def get_client(**overrides: Any) -> ProclinkClient:
    """Get a client configured from environment variables.

    Returns:
        A ProclinkClient whose link reads PROCLINK_* variables.
    """
    return ProclinkClient.from_env(**overrides)

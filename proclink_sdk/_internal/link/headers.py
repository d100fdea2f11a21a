"""Header resolution for outgoing link requests.

Headers are configured either as a static mapping or as a function. The
function receives the single operation in non-batched mode and the full list
of operations in batched mode; which shape applies is decided once, from the
link configuration.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence

import httpx

from proclink_sdk._internal.link.models import Operation

HeaderMap = Mapping[str, str | Sequence[str] | None]
OperationHeadersFn = Callable[[Operation], HeaderMap | None]
BatchHeadersFn = Callable[[list[Operation]], HeaderMap | None]


def build_headers(values: HeaderMap | None) -> httpx.Headers:
    """Turn a header mapping into a concrete header set.

    List values append one header line per entry under the same name;
    single values set the header, replacing earlier lines of that name.
    ``None`` is sent as an empty value.
    """
    items: list[tuple[str, str]] = []
    for key, value in (values or {}).items():
        if isinstance(value, (list, tuple)):
            items.extend((key, item) for item in value)
        else:
            lowered = key.lower()
            items = [(name, item) for name, item in items if name.lower() != lowered]
            items.append((key, value or ""))
    return httpx.Headers(items)


class HeaderResolver(ABC):
    """Produces the header set for one operation or one batch."""

    @abstractmethod
    def for_operation(self, operation: Operation) -> httpx.Headers:
        ...

    @abstractmethod
    def for_batch(self, operations: list[Operation]) -> httpx.Headers:
        ...


class StaticHeaders(HeaderResolver):
    def __init__(self, headers: HeaderMap | None = None) -> None:
        self._headers = dict(headers or {})

    def for_operation(self, operation: Operation) -> httpx.Headers:
        return build_headers(self._headers)

    def for_batch(self, operations: list[Operation]) -> httpx.Headers:
        return build_headers(self._headers)


class OperationHeaders(HeaderResolver):
    """Header function taking a single operation (non-batched links)."""

    def __init__(self, fn: OperationHeadersFn) -> None:
        self._fn = fn

    def for_operation(self, operation: Operation) -> httpx.Headers:
        return build_headers(self._fn(operation))

    def for_batch(self, operations: list[Operation]) -> httpx.Headers:
        raise TypeError("per-operation header function cannot resolve headers for a batch")


class BatchHeaders(HeaderResolver):
    """Header function taking the list of operations (batched links).

    Operations routed around the aggregator are passed as a one-item list.
    """

    def __init__(self, fn: BatchHeadersFn) -> None:
        self._fn = fn

    def for_operation(self, operation: Operation) -> httpx.Headers:
        return build_headers(self._fn([operation]))

    def for_batch(self, operations: list[Operation]) -> httpx.Headers:
        return build_headers(self._fn(list(operations)))


def create_header_resolver(
    headers: HeaderMap | OperationHeadersFn | BatchHeadersFn | None,
    *,
    batched: bool,
) -> HeaderResolver:
    """Select the header strategy for a link configuration."""
    if callable(headers):
        return BatchHeaders(headers) if batched else OperationHeaders(headers)  # type: ignore[arg-type]
    return StaticHeaders(headers)

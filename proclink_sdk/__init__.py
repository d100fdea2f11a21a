"""Proclink SDK for Python.

Client-side dispatch for typed remote procedures over HTTP: queries and
mutations are sent one request each, or coalesced into ``_batch`` requests
and routed back to their callers by correlation id.

Public API:
    ProclinkClient - Awaitable query/mutation client
    HttpLink - Callback-based dispatcher the client is built on
    Operation, LinkOptions, BatchOptions - Configuration and value types
"""

from proclink_sdk._internal.link import (
    BatchOptions,
    CancellationHandle,
    CancellationToken,
    HttpLink,
    LinkOptions,
    Operation,
)
from proclink_sdk._version import __version__
from proclink_sdk.client import ProclinkClient, get_client
from proclink_sdk.exceptions import (
    INTERNAL_SERVER_ERROR,
    ProclinkConfigError,
    ProclinkError,
    ProtocolError,
    UnsupportedOperationError,
)

__all__ = [
    "__version__",
    "ProclinkClient",
    "get_client",
    "HttpLink",
    "LinkOptions",
    "BatchOptions",
    "Operation",
    "CancellationToken",
    "CancellationHandle",
    "ProclinkError",
    "ProtocolError",
    "UnsupportedOperationError",
    "ProclinkConfigError",
    "INTERNAL_SERVER_ERROR",
]

"""Link layer: turns operations into HTTP requests and routes results back."""

from proclink_sdk._internal.link.batch import BatchAggregator
from proclink_sdk._internal.link.headers import (
    BatchHeaders,
    HeaderResolver,
    OperationHeaders,
    StaticHeaders,
    build_headers,
    create_header_resolver,
)
from proclink_sdk._internal.link.link import BatchOptions, HttpLink, LinkOptions
from proclink_sdk._internal.link.models import (
    CancelledOutcome,
    ErrorOutcome,
    Operation,
    OperationMethod,
    SuccessOutcome,
    TransportOutcome,
)
from proclink_sdk._internal.link.pending import (
    CancellationHandle,
    CancellationToken,
    PendingCall,
)
from proclink_sdk._internal.link.transport import RequestSpec, TransportExecutor

__all__ = [
    "HttpLink",
    "LinkOptions",
    "BatchOptions",
    "BatchAggregator",
    "TransportExecutor",
    "RequestSpec",
    "HeaderResolver",
    "StaticHeaders",
    "OperationHeaders",
    "BatchHeaders",
    "build_headers",
    "create_header_resolver",
    "Operation",
    "OperationMethod",
    "PendingCall",
    "CancellationToken",
    "CancellationHandle",
    "TransportOutcome",
    "SuccessOutcome",
    "ErrorOutcome",
    "CancelledOutcome",
]

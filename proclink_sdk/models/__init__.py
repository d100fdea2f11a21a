"""Public value types of the Proclink SDK."""

from proclink_sdk._internal.link.link import BatchOptions, LinkOptions
from proclink_sdk._internal.link.models import Operation, OperationMethod

__all__ = ["Operation", "OperationMethod", "LinkOptions", "BatchOptions"]

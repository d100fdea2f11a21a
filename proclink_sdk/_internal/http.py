"""Shared HTTP client configuration."""

import httpx

from proclink_sdk._version import __version__

DEFAULT_TIMEOUT_MS = 30_000


def create_http_client(*, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> httpx.AsyncClient:
    """Create the async HTTP client a link owns when none is supplied.

    Args:
        timeout_ms: Request timeout in milliseconds.

    Returns:
        Configured httpx.AsyncClient instance.
    """
    return httpx.AsyncClient(
        timeout=timeout_ms / 1000,
        headers={"User-Agent": f"proclink-sdk/{__version__}"},
    )

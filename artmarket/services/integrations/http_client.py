"""
HTTP client helper with standardized timeout configuration.

Every outbound call (search engine, push service) goes through a client built here,
so a slow collaborator fails the invocation instead of hanging it.
"""

import httpx


def get_httpx_timeout() -> httpx.Timeout:
    """
    Get standardized timeout configuration for HTTP clients.

    Returns:
        httpx.Timeout used by all trigger handlers
    """
    return httpx.Timeout(
        10.0,  # Default timeout for all operations
        connect=5.0,
        read=10.0,
        write=5.0,
        pool=5.0,
    )


def create_httpx_client(
    base_url: str = "",
    headers: dict[str, str] | None = None,
    auth: httpx.Auth | tuple[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient with standardized timeout configuration.

    Args:
        base_url: Base URL prepended to relative request paths
        headers: Default headers (e.g. Authorization)
        auth: Optional basic-auth tuple or httpx.Auth
        transport: Optional transport override (tests use httpx.MockTransport)

    Returns:
        httpx.AsyncClient configured with appropriate timeouts
    """
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        auth=auth,
        timeout=get_httpx_timeout(),
        transport=transport,
    )

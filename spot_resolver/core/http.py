"""
HTTP helper shared by the token manager, catalog fetcher and matcher.

Every request of the pipeline goes through request_json() so that
connection errors, timeouts, non-JSON bodies and non-2xx statuses are
reported the same way: as TransportError carrying the server's own error
text when it sent one.
"""

import asyncio
from typing import Any

import aiohttp

from spot_resolver.core.exceptions import TransportError
from spot_resolver.core.logger import get_logger

logger = get_logger(__name__)


def _error_message(payload: Any, fallback: str) -> str:
    """
    Extract a human-readable error message from an error body.

    Handles the shapes used by the services we talk to:
        Spotify Web API:  {"error": {"status": 404, "message": "..."}}
        Spotify accounts: {"error": "invalid_client", "error_description": "..."}
        Search backend:   {"message": "..."} or {"error": "..."}
    """
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("error_description"):
            return str(payload["error_description"])
        if payload.get("message"):
            return str(payload["message"])
        if isinstance(error, str) and error:
            return error
    return fallback


async def request_json(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    data: Any = None,
    raise_for_status: bool = True
) -> tuple[int, Any]:
    """
    Perform an HTTP request and decode the JSON body.

    Args:
        session: The aiohttp session owned by the host.
        method: HTTP method ("GET", "POST").
        url: Absolute URL.
        headers: Request headers.
        params: Query string parameters.
        data: Request body (form string or dict).
        raise_for_status: If True, non-2xx responses raise TransportError.
                          If False, the caller inspects the status itself.

    Returns:
        Tuple of (status code, decoded JSON payload). The payload is None
        for an empty body.

    Raises:
        TransportError: On connection failure, timeout, undecodable body,
                        or (when raise_for_status) a non-2xx status.
    """
    logger.debug(f"{method} {url}")

    try:
        async with session.request(method, url, headers=headers, params=params, data=data) as response:
            status = response.status
            try:
                payload = await response.json(content_type=None)
            except ValueError as e:
                if raise_for_status and status >= 400:
                    raise TransportError(
                        f"HTTP {status} from {url}",
                        details={"url": url, "status": status},
                        status=status
                    ) from e
                raise TransportError(
                    f"Invalid JSON response from {url}",
                    details={"url": url, "status": status, "original_error": str(e)},
                    status=status
                ) from e
    except aiohttp.ClientError as e:
        raise TransportError(
            f"Request to {url} failed: {e}",
            details={"url": url, "original_error": str(e)}
        ) from e
    except asyncio.TimeoutError as e:
        raise TransportError(
            f"Request to {url} timed out",
            details={"url": url}
        ) from e

    if raise_for_status and status >= 400:
        message = _error_message(payload, f"HTTP {status} from {url}")
        raise TransportError(
            message,
            details={"url": url, "status": status},
            status=status
        )

    return status, payload

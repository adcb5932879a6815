"""
Shared HTTP request helpers for service backends.

Keeps JSON response handling and error mapping consistent for external
services such as the OSRM match API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from core.exceptions import ExternalServiceException, RateLimitException

if TYPE_CHECKING:
    from yarl import URL

logger = logging.getLogger(__name__)


async def request_json(
    url: str | URL,
    *,
    session: Any,
    service_name: str = "Service",
    timeout: Any | None = None,
) -> Any:
    """Issue a GET request and decode the JSON body of a 200 response.

    Raises:
        RateLimitException: the service answered 429.
        ExternalServiceException: any other non-200 status or a body that is
            not valid JSON.
    """
    request_kwargs: dict[str, Any] = {}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    async with session.get(url, **request_kwargs) as response:
        if response.status == 429:
            retry_after = response.headers.get("Retry-After", "")
            msg = f"{service_name} error: 429"
            raise RateLimitException(
                msg,
                {
                    "status": 429,
                    "retry_after": retry_after,
                    "url": str(getattr(response, "url", url)),
                },
            )
        if response.status != 200:
            body = await response.text()
            msg = f"{service_name} error: {response.status}"
            raise ExternalServiceException(
                msg,
                {
                    "status": response.status,
                    "body": body[:500],
                    "url": str(getattr(response, "url", url)),
                },
            )
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError) as e:
            msg = f"{service_name} error: invalid JSON response"
            raise ExternalServiceException(
                msg,
                {"url": str(url), "reason": str(e)},
            ) from e

"""Minimal async HTTP JSON client shared by all providers."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

from ipprobe.config import DEFAULT_TIMEOUT, USER_AGENT
from ipprobe.errors import NetworkError, ParseError

logger = logging.getLogger(__name__)


def create_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Build the AsyncClient used for every outbound request."""
    return httpx.AsyncClient(
        http2=True,
        follow_redirects=True,
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": USER_AGENT},
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Mapping[str, str]] = None,
) -> Any:
    """GET *url* and return the decoded JSON body.

    The HTTP status is not interpreted: providers that answer errors with a
    JSON body have that body returned as-is.

    Raises
    ------
    NetworkError
        On any request failure, including timeouts and redirect loops.
    ParseError
        When the body cannot be decompressed or decoded as JSON.
    """
    logger.debug("GET %s params=%s", url, dict(params) if params else None)
    try:
        resp = await client.get(url, params=params)
    except httpx.DecodingError as exc:
        raise ParseError(f"Response from {url} could not be decoded: {exc}") from exc
    except httpx.RequestError as exc:
        raise NetworkError(url, str(exc) or type(exc).__name__) from exc

    logger.debug("%s -> %d (%d bytes)", resp.url, resp.status_code, len(resp.content))
    try:
        return resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"Response from {url} is not valid JSON: {exc}") from exc

"""
Shared async HTTP client with:
- Timeouts
- Redirect limits
- JSON helpers for the REST document store
- Multipart upload for the object store

No retry loop: a failed call surfaces immediately and retry is always a
user-triggered re-run of the coordinator.
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp
from aiohttp import ClientSession, TCPConnector

from sangeet.config.settings import settings

logger = logging.getLogger(__name__)


class HttpError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(f"HTTP {status}: {message}")


def build_session() -> ClientSession:
    connector = TCPConnector(limit=20)
    timeout = aiohttp.ClientTimeout(total=settings.HTTP_TIMEOUT_SECONDS)
    return ClientSession(
        connector=connector,
        timeout=timeout,
        trust_env=False,
    )


async def fetch_json(
    session: ClientSession,
    url: str,
    *,
    params: Optional[dict] = None,
) -> Any:
    return await request_json(session, "GET", url, params=params)


async def send_json(
    session: ClientSession,
    method: str,
    url: str,
    payload: Any = None,
    *,
    params: Optional[dict] = None,
) -> Any:
    return await request_json(session, method, url, params=params, json=payload)


async def upload_form(
    session: ClientSession,
    url: str,
    fields: dict[str, str],
    *,
    data: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> Any:
    """POST a multipart form with one file part named 'file'."""
    form = aiohttp.FormData()
    for name, value in fields.items():
        form.add_field(name, value)
    form.add_field(
        "file",
        data,
        filename=filename,
        content_type=content_type or "application/octet-stream",
    )
    timeout = aiohttp.ClientTimeout(total=settings.HTTP_UPLOAD_TIMEOUT_SECONDS)
    return await request_json(session, "POST", url, data=form, timeout=timeout)


async def request_json(
    session: ClientSession,
    method: str,
    url: str,
    *,
    params: Optional[dict] = None,
    json: Any = None,
    data: Any = None,
    timeout: Optional[aiohttp.ClientTimeout] = None,
) -> Any:
    """
    Single request, JSON response.
    Raises HttpError for status >= 400 and for connection failures
    (status 0) so callers deal with one exception type.
    """
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        async with session.request(
            method,
            url,
            params=params,
            json=json,
            data=data,
            allow_redirects=True,
            max_redirects=settings.HTTP_MAX_REDIRECTS,
            **kwargs,
        ) as resp:
            if resp.status >= 400:
                body = await resp.text()
                logger.warning(
                    "HTTP error response",
                    extra={"method": method, "status": resp.status, "url": _redact(url)},
                )
                raise HttpError(resp.status, body[:200])
            try:
                return await resp.json(content_type=None)
            except ValueError as exc:
                logger.warning(
                    "Invalid JSON response",
                    extra={"method": method, "status": resp.status, "url": _redact(url)},
                )
                raise HttpError(resp.status, "invalid JSON response") from exc
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.warning(
            "HTTP request failed",
            extra={"method": method, "url": _redact(url), "error": str(exc) or type(exc).__name__},
        )
        raise HttpError(0, str(exc) or type(exc).__name__) from exc


def _redact(url: str) -> str:
    return url.split("?", 1)[0][:120]

"""Outbound HTTP helpers shared by every relay route"""

from typing import Optional
import asyncio

import httpx

from juris_relay.config import settings
from juris_relay.logs import log_step

# Tests swap this for an httpx.MockTransport
transport: Optional[httpx.BaseTransport] = None

# Failures worth a second attempt; protocol and proxy misconfiguration are not
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


def http_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """
    Create a client bound by the configured upstream timeout. httpx applies
    it per phase (connect, read, write, pool); `send_with_retry` adds the
    total deadline.
    """
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.UPSTREAM_TIMEOUT,
        transport=transport,
    )


async def _send(client, method, url, max_retries, kwargs) -> httpx.Response:
    attempt = 0
    while True:
        try:
            return await client.request(method, url, **kwargs)
        except TRANSIENT_ERRORS as e:
            attempt += 1
            if attempt > max_retries:
                raise
            log_step("UPSTREAM", "🔁 Transport error, retrying",
                     url=url, attempt=attempt, error=type(e).__name__)


async def send_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    retries: Optional[int] = None,
    deadline: Optional[float] = None,
    **kwargs,
) -> httpx.Response:
    """
    Send one request, retrying only on transient transport failures
    (timeouts, connect/read errors). Any HTTP response, 4xx and 5xx
    included, is returned as is. All attempts together are bounded by
    `deadline` (UPSTREAM_DEADLINE by default).
    """
    max_retries = settings.UPSTREAM_RETRIES if retries is None else retries
    total = settings.UPSTREAM_DEADLINE if deadline is None else deadline
    try:
        return await asyncio.wait_for(_send(client, method, url, max_retries, kwargs), timeout=total)
    except asyncio.TimeoutError:
        log_step("UPSTREAM", "⏱️ Deadline exceeded", url=url, deadline=total)
        raise httpx.TimeoutException(f"Upstream deadline of {total}s exceeded")

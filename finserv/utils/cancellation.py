"""Abandon in-flight work when the HTTP client goes away.

The chat relay awaits an upstream call that can take several seconds. If the
browser closes the connection meanwhile there is nobody to answer, so the
upstream task is cancelled instead of left running.
"""

import asyncio
from typing import Awaitable, TypeVar

from fastapi import Request

from finserv.utils.debug import print__debug

T = TypeVar("T")

DISCONNECT_POLL_INTERVAL = 0.5  # seconds between disconnect checks

# 499 Client Closed Request
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The client closed the connection before the work finished."""


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """Await ``work`` while polling ``request.is_disconnected()``.

    Raises:
        ClientDisconnected: the client went away; ``work`` has been cancelled.
    """
    task = asyncio.ensure_future(work)
    try:
        while not task.done():
            if await request.is_disconnected():
                print__debug(f"🛑 Client disconnected during {request.url.path}, cancelling")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                raise ClientDisconnected(request.url.path)

            # shield keeps the poll timeout from cancelling the task itself
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=poll_interval)
            except asyncio.TimeoutError:
                continue

        return task.result()
    finally:
        if not task.done():
            task.cancel()

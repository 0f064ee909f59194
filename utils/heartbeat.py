"""Background "typing" signal kept alive while a request is in flight."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

LOGGER = logging.getLogger(__name__)


async def _beat(signal: Callable[[], Awaitable[None]], interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await signal()
        except Exception as exc:
            LOGGER.debug("Typing heartbeat failed: %s", exc)


@asynccontextmanager
async def typing_heartbeat(signal: Callable[[], Awaitable[None]], interval: float = 5.0) -> AsyncIterator[None]:
    """Call `signal` every `interval` seconds until the block exits, however it exits."""
    task = asyncio.create_task(_beat(signal, interval))
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

"""Async retry helpers used for outbound Telegram calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")
AsyncFactory = Callable[[], Awaitable[T]]
DelayHint = Callable[[BaseException], float | None]


async def retry_async(
    operation: AsyncFactory[T],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    delay_hint: DelayHint | None = None,
    logger=None,
    operation_name: str = "operation",
) -> T:
    """Retry an async operation with linear backoff.

    Only exceptions matching ``retry_on`` are retried. ``delay_hint`` may
    return a server-provided wait (e.g. flood control) that replaces the
    computed backoff for that attempt.
    """

    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= max_attempts:
                raise
            hinted = delay_hint(exc) if delay_hint is not None else None
            delay = hinted if hinted is not None else base_delay * attempt
            if logger is not None:
                logger.warning(
                    "retrying_operation",
                    operation=operation_name,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    delay=delay,
                    error=str(exc),
                )
            await asyncio.sleep(delay)
            attempt += 1


__all__ = ["retry_async"]

# sportshub/utils/retry.py
from __future__ import annotations

"""Retry helper (exponential backoff + jitter) shared by store and queue calls."""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type


async def retry_async(
    coro_factory: Callable[[], Awaitable[Any]],
    *,
    attempts: int,
    base_delay: float,
    max_delay: float,
    jitter: float = 0.1,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Any:
    """
    Retry an async operation with exponential backoff and small jitter.

    Only exceptions in `retry_on` are retried; anything else propagates at once.
    The last error is re-raised when attempts run out.
    """
    last_exc: Optional[BaseException] = None
    delay = float(base_delay)
    for i in range(max(1, attempts)):
        try:
            return await coro_factory()
        except retry_on as e:
            last_exc = e
            if i >= attempts - 1:
                break
            await asyncio.sleep(delay + random.uniform(0, jitter))
            delay = min(max_delay, delay * 2)
    assert last_exc is not None
    raise last_exc


__all__ = ["retry_async"]

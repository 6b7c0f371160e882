# app/core/retry.py
# 외부 API 호출용 재시도 래퍼 (지수 백오프)
# - UpstreamUnavailable 중 retryable=True 인 것만 재시도
# - RateLimited/인증 실패는 바로 올려보낸다

from __future__ import annotations
import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from app.core.errors import UpstreamUnavailable

log = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float) -> float:
    # 1회차 실패 후 base, 그 다음 2*base, 4*base ...
    return base_delay * (2 ** (attempt - 1))


def retry_async(
    attempts: int = 3, base_delay: float = 0.5
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    attempts = max(1, int(attempts))

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 1
            while True:
                try:
                    return await fn(*args, **kwargs)
                except UpstreamUnavailable as e:
                    if not e.retryable or attempt >= attempts:
                        raise
                    delay = backoff_delay(attempt, base_delay)
                    log.warning(
                        "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                        fn.__qualname__, attempt, attempts, e, delay,
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator

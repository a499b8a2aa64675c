"""Internal utility helpers."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Tuple, Type, TypeVar

from .config import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")
_MISSING = object()


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Get dict value or attribute while preserving falsy values."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    attr_val = getattr(obj, key, _MISSING)
    if attr_val is not _MISSING:
        return attr_val
    return default


def _backoff(config: RetryConfig, attempt: int) -> float:
    delay = min(config.initial_delay * (config.exponential_base ** attempt), config.max_delay)
    if config.jitter:
        delay *= 0.5 + random.random()
    return delay


def _retry(
    config: RetryConfig,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Callable[[BaseException], bool] = lambda exc: True,
    sleep: Callable[[float], None] = time.sleep,
):
    """Retry decorator with exponential backoff.

    Only ``retry_on`` errors accepted by ``should_retry`` are retried; the last
    error is re-raised once ``config.max_retries`` is exhausted.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except retry_on as exc:
                    if attempt >= config.max_retries or not should_retry(exc):
                        raise
                    delay = _backoff(config, attempt)
                    logger.warning(
                        "request failed (%d/%d), retrying in %.1fs: %s",
                        attempt + 1,
                        config.max_retries + 1,
                        delay,
                        exc,
                    )
                    sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


__all__ = ["_get", "_retry"]

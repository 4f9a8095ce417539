"""Bounded exponential backoff shared by every external-service adapter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from app.config import Settings
from app.core.exceptions import ExternalCallTimeout, ExternalServiceError, is_retryable_status

T = TypeVar("T")
logger = logging.getLogger(__name__)


def retry_status(exc: BaseException) -> int | None:
  """Return the HTTP status carried by an exception, if any."""
  if isinstance(exc, ExternalServiceError):
    return exc.status_code
  if isinstance(exc, httpx.HTTPStatusError):
    return exc.response.status_code
  return None


def is_retryable(exc: BaseException) -> bool:
  """Retry only on rate limiting (429) and server errors (5xx)."""
  return is_retryable_status(retry_status(exc))


@dataclass(frozen=True)
class RetryPolicy:
  """
  Retry an async call with exponential backoff.

  max_retries counts retries after the first attempt, so the default of 3
  allows 4 attempts with delays of 2s, 4s and 8s. The whole sequence,
  sleeps included, is bounded by timeout_seconds.
  """

  max_retries: int = 3
  base_delay_seconds: float = 2.0
  timeout_seconds: float | None = 60.0
  sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False, repr=False)

  @classmethod
  def from_settings(cls, settings: Settings) -> RetryPolicy:
    return cls(max_retries=settings.retry_max_retries, base_delay_seconds=settings.retry_base_delay_seconds, timeout_seconds=settings.external_call_timeout_seconds)

  def delay_for(self, attempt: int) -> float:
    """Delay in seconds before the retry that follows attempt number `attempt`."""
    return self.base_delay_seconds * (2 ** (attempt - 1))

  async def call(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
    """Run func with retries, raising ExternalCallTimeout when the budget is spent."""
    if self.timeout_seconds is None:
      return await self._attempts(operation, func, *args, **kwargs)
    try:
      return await asyncio.wait_for(self._attempts(operation, func, *args, **kwargs), timeout=self.timeout_seconds)
    except asyncio.TimeoutError as exc:
      logger.error("External call timed out: operation=%s, timeout=%.1fs", operation, self.timeout_seconds)
      raise ExternalCallTimeout(operation, self.timeout_seconds) from exc

  async def _attempts(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
    max_attempts = self.max_retries + 1
    attempt = 0
    while True:
      attempt += 1
      try:
        result = await func(*args, **kwargs)
        if attempt > 1:
          logger.info("External call succeeded after retry: operation=%s, attempt=%d/%d", operation, attempt, max_attempts)
        return result
      except Exception as exc:
        if not is_retryable(exc):
          raise
        if attempt >= max_attempts:
          logger.error("External call failed after %d attempts: operation=%s, status=%s - giving up", max_attempts, operation, retry_status(exc))
          raise
        delay = self.delay_for(attempt)
        logger.warning("Retrying %s, attempt %d/%d after status=%s in %.1fs", operation, attempt + 1, max_attempts, retry_status(exc), delay)
        await self.sleep(delay)

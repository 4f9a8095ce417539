"""Shared fixtures for the engine tests."""

from __future__ import annotations

import pytest

from app.ai.backoff import RetryPolicy


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


class RecordingSleep:
  """Stands in for asyncio.sleep and remembers each requested delay."""

  def __init__(self) -> None:
    self.delays: list[float] = []

  async def __call__(self, delay: float) -> None:
    self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
  return RecordingSleep()


@pytest.fixture
def fast_retry(recording_sleep: RecordingSleep) -> RetryPolicy:
  return RetryPolicy(max_retries=3, base_delay_seconds=2.0, timeout_seconds=5.0, sleep=recording_sleep)

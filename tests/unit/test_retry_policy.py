from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from app.ai.backoff import RetryPolicy, is_retryable
from app.core.exceptions import ErrorKind, ExternalCallTimeout, ExternalServiceError
from app.utils.http import send


def _scripted_client(statuses: list[int]) -> tuple[httpx.AsyncClient, list[int]]:
  """Client whose responses follow `statuses`, recording each attempt."""
  attempts: list[int] = []

  def handler(request: httpx.Request) -> httpx.Response:
    status = statuses[len(attempts)]
    attempts.append(status)
    return httpx.Response(status, json={"ok": status == 200})

  return httpx.AsyncClient(transport=httpx.MockTransport(handler)), attempts


@pytest.mark.anyio
async def test_two_503s_then_success_takes_three_attempts(fast_retry, recording_sleep) -> None:
  client, attempts = _scripted_client([503, 503, 200])
  async with client:
    response = await fast_retry.call("svc", send, "svc", client, "GET", "https://svc.test/x")

  assert response.json() == {"ok": True}
  assert attempts == [503, 503, 200]
  assert recording_sleep.delays == [2.0, 4.0]


@pytest.mark.anyio
async def test_404_is_not_retried(fast_retry, recording_sleep) -> None:
  client, attempts = _scripted_client([404, 200])
  async with client:
    with pytest.raises(ExternalServiceError) as excinfo:
      await fast_retry.call("svc", send, "svc", client, "GET", "https://svc.test/x")

  assert excinfo.value.status_code == 404
  assert attempts == [404]
  assert recording_sleep.delays == []


@pytest.mark.anyio
async def test_exhausted_retries_reraise_last_error(fast_retry, recording_sleep) -> None:
  client, attempts = _scripted_client([500, 502, 503, 429])
  async with client:
    with pytest.raises(ExternalServiceError) as excinfo:
      await fast_retry.call("svc", send, "svc", client, "GET", "https://svc.test/x")

  assert excinfo.value.status_code == 429
  assert len(attempts) == 4
  assert recording_sleep.delays == [2.0, 4.0, 8.0]


@pytest.mark.anyio
async def test_retries_are_logged_with_attempt_numbers(fast_retry, caplog) -> None:
  client, _ = _scripted_client([503, 200])
  caplog.set_level(logging.WARNING, logger="app.ai.backoff")
  async with client:
    await fast_retry.call("subtitle search", send, "svc", client, "GET", "https://svc.test/x")

  messages = [record.getMessage() for record in caplog.records]
  assert any("subtitle search" in message and "attempt 2/4" in message for message in messages)


@pytest.mark.anyio
async def test_non_http_errors_propagate_immediately(recording_sleep) -> None:
  policy = RetryPolicy(sleep=recording_sleep)
  calls = 0

  async def broken() -> None:
    nonlocal calls
    calls += 1
    raise ValueError("bad input")

  with pytest.raises(ValueError):
    await policy.call("broken", broken)
  assert calls == 1


@pytest.mark.anyio
async def test_overall_timeout_raises_external_call_timeout() -> None:
  policy = RetryPolicy(timeout_seconds=0.05)

  async def hang() -> None:
    await asyncio.sleep(10)

  with pytest.raises(ExternalCallTimeout) as excinfo:
    await policy.call("slow service", hang)
  assert excinfo.value.operation == "slow service"
  assert not is_retryable(excinfo.value)


def test_delays_double_from_the_base() -> None:
  policy = RetryPolicy(base_delay_seconds=2.0)
  assert [policy.delay_for(attempt) for attempt in (1, 2, 3)] == [2.0, 4.0, 8.0]


def test_retryable_classification() -> None:
  assert is_retryable(ExternalServiceError("svc", 429, "slow down"))
  assert is_retryable(ExternalServiceError("svc", 500, "boom"))
  assert not is_retryable(ExternalServiceError("svc", 400, "bad"))
  assert not is_retryable(ExternalServiceError("svc", None, "transport error"))


def test_error_kind_follows_the_retry_rule() -> None:
  assert ExternalServiceError("svc", 503, "down").kind is ErrorKind.TRANSIENT_EXTERNAL
  assert ExternalServiceError("svc", 404, "missing").kind is ErrorKind.PERMANENT_EXTERNAL
  assert ExternalServiceError("svc", None, "transport error").kind is ErrorKind.PERMANENT_EXTERNAL

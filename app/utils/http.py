"""Helpers for translating httpx responses into domain errors."""

from __future__ import annotations

from typing import Any

import httpx

from app.core.exceptions import ExternalServiceError, MalformedResponseError

_MAX_DETAIL_CHARS = 300


def raise_for_status(service: str, response: httpx.Response) -> None:
  """Raise ExternalServiceError for any non-2xx response."""
  if response.is_success:
    return
  detail = response.text[:_MAX_DETAIL_CHARS] if response.content else response.reason_phrase
  raise ExternalServiceError(service, response.status_code, detail)


def json_body(service: str, response: httpx.Response) -> Any:
  """Decode a JSON body, raising MalformedResponseError when it is not JSON."""
  try:
    return response.json()
  except ValueError as exc:
    raise MalformedResponseError(f"{service} returned a non-JSON body") from exc


async def send(service: str, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
  """Send a request and convert transport failures into ExternalServiceError."""
  try:
    response = await client.request(method, url, **kwargs)
  except httpx.TimeoutException as exc:
    raise ExternalServiceError(service, None, f"request timed out: {exc}") from exc
  except httpx.TransportError as exc:
    raise ExternalServiceError(service, None, f"transport error: {exc}") from exc
  raise_for_status(service, response)
  return response

"""Gemini-backed JSON generation and speech synthesis using the google-genai SDK."""

from __future__ import annotations

import json
import logging
from typing import Any

from google import genai
from google.genai import errors as genai_errors

from app.ai.backoff import RetryPolicy
from app.ai.json_parser import parse_json_with_fallback, strip_json_fences
from app.core.exceptions import ExternalServiceError, MalformedResponseError

logger = logging.getLogger(__name__)

SERVICE = "gemini"


def build_gemini_client(api_key: str | None) -> genai.Client:
  if not api_key:
    raise ValueError("GEMINI_API_KEY environment variable is required")
  return genai.Client(api_key=api_key)


async def _generate(client: genai.Client, **kwargs: Any) -> Any:
  """Call generate_content, translating SDK errors into ExternalServiceError."""
  try:
    # Use the async client to avoid blocking the asyncio event loop.
    return await client.aio.models.generate_content(**kwargs)
  except genai_errors.APIError as exc:
    raise ExternalServiceError(SERVICE, exc.code, exc.message or str(exc)) from exc


class GeminiJsonGenerator:
  """JSON-mode text generation."""

  def __init__(self, client: genai.Client, *, model: str, retry: RetryPolicy, temperature: float = 0.7) -> None:
    self._client = client
    self._model = model
    self._retry = retry
    self._temperature = temperature

  async def generate_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    config = {"system_instruction": system_prompt, "response_mime_type": "application/json", "temperature": self._temperature}
    response = await self._retry.call(f"gemini {self._model}", _generate, self._client, model=self._model, contents=user_prompt, config=config)

    text = response.text
    if not text:
      raise MalformedResponseError("Gemini returned an empty response")
    logger.debug("Gemini response (%d chars)", len(text))
    try:
      parsed = parse_json_with_fallback(strip_json_fences(text))
    except json.JSONDecodeError as exc:
      raise MalformedResponseError(f"Gemini returned invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
      raise MalformedResponseError("Gemini returned JSON that is not an object")
    return parsed


class GeminiSpeechSynthesizer:
  """Text-to-speech returning MP3 bytes."""

  def __init__(self, client: genai.Client, *, model: str, voice: str | None, retry: RetryPolicy) -> None:
    self._client = client
    self._model = model
    self._voice = voice
    self._retry = retry

  async def synthesize(self, text: str) -> bytes:
    config = {"response_mime_type": "audio/mp3"}
    # Include voice/style hints when provided, since the SDK does not expose a stable voice selector here.
    voice_hint = f"Voice/style: {self._voice}\n" if self._voice else ""
    prompt = f"{voice_hint}Read the following text clearly and naturally:\n\n{text}"

    response = await self._retry.call(f"gemini tts {self._model}", _generate, self._client, model=self._model, contents=prompt, config=config)

    for part in response.parts or []:
      if part.inline_data and part.inline_data.data:
        return part.inline_data.data
    raise MalformedResponseError("No audio data received from Gemini.")

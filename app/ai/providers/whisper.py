"""Speech-to-text through an OpenAI-compatible transcription endpoint."""

from __future__ import annotations

import logging

import httpx

from app.ai.backoff import RetryPolicy
from app.core.exceptions import MalformedResponseError, TranscriptionFailed
from app.utils.http import json_body, send

logger = logging.getLogger(__name__)

SERVICE = "transcription"


class TranscriptionAdapter:
  """Posts audio as multipart form data and returns the transcript text."""

  def __init__(self, client: httpx.AsyncClient, *, api_key: str, base_url: str, retry: RetryPolicy, model: str = "whisper-1", language: str = "en") -> None:
    self._client = client
    self._url = f"{base_url.rstrip('/')}/audio/transcriptions"
    self._headers = {"Authorization": f"Bearer {api_key}"}
    self._retry = retry
    self._model = model
    self._language = language

  async def transcribe(self, audio: bytes, filename: str, prompt_hint: str | None = None, *, content_type: str = "audio/mpeg") -> str:
    """Transcribe audio; an empty transcript raises TranscriptionFailed."""
    logger.debug("Sending transcription request, file=%s, size=%d bytes", filename, len(audio))
    data = {"model": self._model, "language": self._language, "temperature": "0"}
    if prompt_hint and prompt_hint.strip():
      data["prompt"] = prompt_hint
    files = {"file": (filename, audio, content_type)}

    response = await self._retry.call("transcription", send, SERVICE, self._client, "POST", self._url, data=data, files=files, headers=self._headers)
    try:
      body = json_body(SERVICE, response)
    except MalformedResponseError as exc:
      raise TranscriptionFailed("Transcription response was not JSON") from exc

    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str) or not text.strip():
      logger.error("Transcription returned no text for %s", filename)
      raise TranscriptionFailed("No text in transcription response")
    return text

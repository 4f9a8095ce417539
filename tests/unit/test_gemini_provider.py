from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from google.genai import errors as genai_errors

from app.ai.backoff import RetryPolicy
from app.ai.providers.gemini import GeminiJsonGenerator, GeminiSpeechSynthesizer
from app.core.exceptions import ExternalServiceError, MalformedResponseError


def _client(*responses: object) -> SimpleNamespace:
  generate_content = AsyncMock(side_effect=list(responses))
  return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))


def _server_error(code: int) -> genai_errors.APIError:
  return genai_errors.APIError(code, {"error": {"code": code, "message": "overloaded", "status": "UNAVAILABLE"}})


@pytest.mark.anyio
async def test_json_generation_sends_system_prompt_and_json_mode(fast_retry: RetryPolicy) -> None:
  client = _client(SimpleNamespace(text='```json\n{"grammar": []}\n```'))
  generator = GeminiJsonGenerator(client, model="gemini-test", retry=fast_retry)

  assert await generator.generate_json("system", "user") == {"grammar": []}
  kwargs = client.aio.models.generate_content.await_args.kwargs
  assert kwargs["model"] == "gemini-test"
  assert kwargs["contents"] == "user"
  assert kwargs["config"]["system_instruction"] == "system"
  assert kwargs["config"]["response_mime_type"] == "application/json"


@pytest.mark.anyio
async def test_server_errors_are_retried(fast_retry: RetryPolicy, recording_sleep) -> None:
  client = _client(_server_error(503), SimpleNamespace(text='{"grammar": []}'))
  generator = GeminiJsonGenerator(client, model="gemini-test", retry=fast_retry)

  assert await generator.generate_json("system", "user") == {"grammar": []}
  assert recording_sleep.delays == [2.0]


@pytest.mark.anyio
async def test_client_errors_are_not_retried(fast_retry: RetryPolicy) -> None:
  client = _client(_server_error(400))
  generator = GeminiJsonGenerator(client, model="gemini-test", retry=fast_retry)

  with pytest.raises(ExternalServiceError) as excinfo:
    await generator.generate_json("system", "user")
  assert excinfo.value.status_code == 400
  assert client.aio.models.generate_content.await_count == 1


@pytest.mark.anyio
@pytest.mark.parametrize("text", ["", "not json at all", "[1, 2]"])
async def test_unusable_output_is_malformed(fast_retry: RetryPolicy, text: str) -> None:
  generator = GeminiJsonGenerator(_client(SimpleNamespace(text=text)), model="gemini-test", retry=fast_retry)
  with pytest.raises(MalformedResponseError):
    await generator.generate_json("system", "user")


@pytest.mark.anyio
async def test_speech_returns_inline_audio(fast_retry: RetryPolicy) -> None:
  part = SimpleNamespace(inline_data=SimpleNamespace(data=b"ID3"))
  client = _client(SimpleNamespace(parts=[part]))
  synthesizer = GeminiSpeechSynthesizer(client, model="tts-test", voice="Kore", retry=fast_retry)

  assert await synthesizer.synthesize("code blue") == b"ID3"
  prompt = client.aio.models.generate_content.await_args.kwargs["contents"]
  assert prompt.startswith("Voice/style: Kore\n")
  assert prompt.endswith("code blue")


@pytest.mark.anyio
async def test_speech_without_audio_is_malformed(fast_retry: RetryPolicy) -> None:
  synthesizer = GeminiSpeechSynthesizer(_client(SimpleNamespace(parts=[])), model="tts-test", voice=None, retry=fast_retry)
  with pytest.raises(MalformedResponseError):
    await synthesizer.synthesize("hello")

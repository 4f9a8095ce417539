"""Interfaces for the model services the generation stages depend on."""

from __future__ import annotations

from typing import Any, Protocol


class JsonGenerator(Protocol):
  """Produces a JSON object from a system and user prompt."""

  async def generate_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    """Return the decoded JSON object the model produced."""


class SpeechSynthesizer(Protocol):
  """Converts short text to spoken audio."""

  async def synthesize(self, text: str) -> bytes:
    """Return encoded audio for text."""

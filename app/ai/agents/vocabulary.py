"""Vocabulary extraction stage."""

from __future__ import annotations

from pydantic import TypeAdapter

from app.ai.agents.base import BaseStage
from app.ai.agents.prompts import render_vocabulary_prompts
from app.ai.sanitizer import sanitize_genre
from app.schema.generation import ExtractedVocabulary

_ADAPTER = TypeAdapter(list[ExtractedVocabulary])


class VocabularyExtractor(BaseStage[ExtractedVocabulary]):
  """Extracts vocabulary terms suited to the show's genre."""

  name = "vocabulary"
  root_key = "vocabulary"

  async def run(self, script_text: str, genre: str) -> list[ExtractedVocabulary]:
    system_prompt, user_prompt = render_vocabulary_prompts(script_text, sanitize_genre(genre), self._max_script_chars)
    return await self._generate(system_prompt, user_prompt, _ADAPTER)

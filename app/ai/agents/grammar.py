"""Grammar extraction stage."""

from __future__ import annotations

from pydantic import TypeAdapter

from app.ai.agents.base import BaseStage
from app.ai.agents.prompts import render_grammar_prompts
from app.schema.generation import ExtractedGrammar

_ADAPTER = TypeAdapter(list[ExtractedGrammar])


class GrammarExtractor(BaseStage[ExtractedGrammar]):
  name = "grammar"
  root_key = "grammar"

  async def run(self, script_text: str) -> list[ExtractedGrammar]:
    system_prompt, user_prompt = render_grammar_prompts(script_text, self._max_script_chars)
    return await self._generate(system_prompt, user_prompt, _ADAPTER)

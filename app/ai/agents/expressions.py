"""Expression and idiom extraction stage."""

from __future__ import annotations

from pydantic import TypeAdapter

from app.ai.agents.base import BaseStage
from app.ai.agents.prompts import render_expression_prompts
from app.schema.generation import ExtractedExpression

_ADAPTER = TypeAdapter(list[ExtractedExpression])


class ExpressionExtractor(BaseStage[ExtractedExpression]):
  name = "expressions"
  root_key = "expressions"

  async def run(self, script_text: str) -> list[ExtractedExpression]:
    system_prompt, user_prompt = render_expression_prompts(script_text, self._max_script_chars)
    return await self._generate(system_prompt, user_prompt, _ADAPTER)

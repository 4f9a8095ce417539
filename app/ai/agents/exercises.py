"""Exercise generation stage."""

from __future__ import annotations

import logging

from pydantic import TypeAdapter

from app.ai.agents.base import BaseStage
from app.ai.agents.prompts import render_exercise_prompts
from app.schema.generation import ExtractedExpression, ExtractedGrammar, ExtractedVocabulary, GeneratedExercise

_ADAPTER: TypeAdapter[list[GeneratedExercise]] = TypeAdapter(list[GeneratedExercise])

logger = logging.getLogger(__name__)


class ExerciseGenerator(BaseStage[GeneratedExercise]):
  """Builds exercises from the vocabulary, grammar and expressions already extracted."""

  name = "exercises"
  root_key = "exercises"

  async def run(self, vocabulary: list[ExtractedVocabulary], grammar: list[ExtractedGrammar], expressions: list[ExtractedExpression]) -> list[GeneratedExercise]:
    logger.info("Generating exercises from %d vocabulary, %d grammar, %d expressions", len(vocabulary), len(grammar), len(expressions))
    system_prompt, user_prompt = render_exercise_prompts(vocabulary, grammar, expressions)
    return await self._generate(system_prompt, user_prompt, _ADAPTER)

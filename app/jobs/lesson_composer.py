"""Minimum-content rules for assembling a lesson."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.core.exceptions import LessonContentError
from app.schema.generation import ExtractedExpression, ExtractedGrammar, ExtractedVocabulary, GeneratedExercise, GeneratedLesson, Script

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentThresholds:
  vocabulary: int
  grammar: int
  expressions: int
  exercises: int


MINIMUM_CONTENT = ContentThresholds(vocabulary=10, grammar=3, expressions=5, exercises=10)
HIGH_QUALITY_CONTENT = ContentThresholds(vocabulary=15, grammar=4, expressions=6, exercises=12)


def _meets(thresholds: ContentThresholds, vocabulary: Sequence, grammar: Sequence, expressions: Sequence, exercises: Sequence) -> bool:
  return len(vocabulary) >= thresholds.vocabulary and len(grammar) >= thresholds.grammar and len(expressions) >= thresholds.expressions and len(exercises) >= thresholds.exercises


class LessonComposer:
  """Validates extracted content and builds the lesson aggregate."""

  def __init__(self, minimum: ContentThresholds = MINIMUM_CONTENT, high_quality: ContentThresholds = HIGH_QUALITY_CONTENT) -> None:
    self._minimum = minimum
    self._high_quality = high_quality

  def validate(self, vocabulary: Sequence[ExtractedVocabulary], grammar: Sequence[ExtractedGrammar], expressions: Sequence[ExtractedExpression], exercises: Sequence[GeneratedExercise]) -> None:
    """Raise LessonContentError listing every count below its minimum."""
    errors: list[str] = []
    if len(vocabulary) < self._minimum.vocabulary:
      errors.append(f"Insufficient vocabulary items: {len(vocabulary)} (minimum {self._minimum.vocabulary} required)")
    if len(grammar) < self._minimum.grammar:
      errors.append(f"Insufficient grammar points: {len(grammar)} (minimum {self._minimum.grammar} required)")
    if len(expressions) < self._minimum.expressions:
      errors.append(f"Insufficient expressions: {len(expressions)} (minimum {self._minimum.expressions} required)")
    if len(exercises) < self._minimum.exercises:
      errors.append(f"Insufficient exercises: {len(exercises)} (minimum {self._minimum.exercises} required)")
    if errors:
      raise LessonContentError("Lesson content does not meet minimum requirements: " + ", ".join(errors))

  def is_high_quality(self, vocabulary: Sequence, grammar: Sequence, expressions: Sequence, exercises: Sequence) -> bool:
    return _meets(self._high_quality, vocabulary, grammar, expressions, exercises)

  def compose(self, script: Script, genre: str, vocabulary: Sequence[ExtractedVocabulary], grammar: Sequence[ExtractedGrammar], expressions: Sequence[ExtractedExpression], exercises: Sequence[GeneratedExercise]) -> GeneratedLesson:
    self.validate(vocabulary, grammar, expressions, exercises)
    if not self.is_high_quality(vocabulary, grammar, expressions, exercises):
      logger.warning("Lesson for TMDB %s S%02dE%02d is below the high-quality targets", script.tmdb_id, script.season_number, script.episode_number)
    return GeneratedLesson(tmdb_id=script.tmdb_id, imdb_id=script.imdb_id, season_number=script.season_number, episode_number=script.episode_number, genre=genre, script_source=script.source, vocabulary=list(vocabulary), grammar=list(grammar), expressions=list(expressions), exercises=list(exercises))

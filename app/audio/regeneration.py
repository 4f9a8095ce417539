"""Re-synthesizes audio for lessons that are already stored."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.audio.synthesis import AudioSynthesisStage, EpisodeRef
from app.core.exceptions import EpisodeNotFoundError
from app.schema.generation import ListeningExercise
from app.storage.lessons_repo import LessonRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegenerationResult:
  """Per-kind success and failure counts of one regeneration run."""

  vocabulary_success: int = 0
  vocabulary_failed: int = 0
  expressions_success: int = 0
  expressions_failed: int = 0
  exercises_success: int = 0
  exercises_failed: int = 0

  @property
  def total_success(self) -> int:
    return self.vocabulary_success + self.expressions_success + self.exercises_success

  @property
  def total_failed(self) -> int:
    return self.vocabulary_failed + self.expressions_failed + self.exercises_failed


class AudioRegenerationService:
  """
  Fills in missing audio for a stored lesson.

  Items that already have a URL are skipped unless force is set. Each clip
  succeeds or fails on its own; failed items keep their previous URL and are
  counted in the result rather than aborting the run.
  """

  def __init__(self, stage: AudioSynthesisStage, lessons: LessonRepository, *, concurrency: int = 10) -> None:
    self._stage = stage
    self._lessons = lessons
    self._concurrency = concurrency

  async def regenerate(self, episode_id: str, *, force: bool = False) -> RegenerationResult:
    lesson = await self._lessons.get(episode_id)
    if lesson is None:
      raise EpisodeNotFoundError(episode_id)
    logger.info("Regenerating audio for episode %s, force=%s", episode_id, force)

    episode = EpisodeRef(tmdb_id=lesson.tmdb_id, season_number=lesson.season_number, episode_number=lesson.episode_number)
    semaphore = asyncio.Semaphore(self._concurrency)

    async def _clip(kind: str, text: str) -> str | None:
      async with semaphore:
        try:
          return await self._stage.synthesize_item(episode, kind, text)
        except Exception as exc:  # noqa: BLE001
          logger.warning("Audio regeneration failed for %s '%s': %s", kind, text, exc, exc_info=True)
          return None

    async def _kind(kind: str, texts: dict[int, str]) -> dict[int, str | None]:
      urls = await asyncio.gather(*(_clip(kind, text) for text in texts.values()))
      return dict(zip(texts.keys(), urls, strict=True))

    def _pending(items: Sequence, text_of) -> dict[int, str]:
      return {index: text_of(item) for index, item in enumerate(items) if force or not item.audio_url}

    listening = [exercise if isinstance(exercise, ListeningExercise) else None for exercise in lesson.exercises]
    vocab_urls, expr_urls, listening_urls = await asyncio.gather(
      _kind("vocab", _pending(lesson.vocabulary, lambda item: item.term)),
      _kind("expr", _pending(lesson.expressions, lambda item: item.phrase)),
      _kind("listening", {index: exercise.correct_answer for index, exercise in enumerate(listening) if exercise is not None and (force or not exercise.audio_url)}),
    )

    def _apply(items: Sequence, urls: dict[int, str | None]) -> list:
      return [item.model_copy(update={"audio_url": urls[index]}) if urls.get(index) else item for index, item in enumerate(items)]

    result = RegenerationResult(
      vocabulary_success=_successes(vocab_urls),
      vocabulary_failed=len(vocab_urls) - _successes(vocab_urls),
      expressions_success=_successes(expr_urls),
      expressions_failed=len(expr_urls) - _successes(expr_urls),
      exercises_success=_successes(listening_urls),
      exercises_failed=len(listening_urls) - _successes(listening_urls),
    )
    if result.total_success:
      updated = lesson.model_copy(update={"vocabulary": _apply(lesson.vocabulary, vocab_urls), "expressions": _apply(lesson.expressions, expr_urls), "exercises": _apply(lesson.exercises, listening_urls)})
      await self._lessons.update(episode_id, updated)
    logger.info("Audio regeneration for episode %s: %d succeeded, %d failed", episode_id, result.total_success, result.total_failed)
    return result


def _successes(urls: dict[int, str | None]) -> int:
  return sum(1 for url in urls.values() if url)

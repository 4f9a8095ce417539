"""Speech synthesis for lesson items, stored under deterministic keys."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from app.ai.providers.base import SpeechSynthesizer
from app.schema.generation import ExtractedExpression, ExtractedVocabulary, GeneratedExercise, ListeningExercise
from app.storage.audio_storage import AUDIO_CONTENT_TYPE, AudioStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")
MAX_SLUG_CHARS = 100

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(text: str) -> str:
  """Lowercase, keep [a-z0-9], join words with single hyphens, cap the length."""
  slug = _NON_SLUG_CHARS.sub("", text.lower())
  slug = _HYPHENS.sub("-", _WHITESPACE.sub("-", slug.strip()))
  slug = slug.strip("-")[:MAX_SLUG_CHARS].rstrip("-")
  if not slug:
    # Non-Latin or punctuation-only text still needs a stable key.
    slug = hashlib.sha1(text.encode("utf-8")).hexdigest()[:12]
  return slug


@dataclass(frozen=True)
class EpisodeRef:
  """Identifies the episode the audio belongs to."""

  tmdb_id: str
  season_number: int
  episode_number: int

  @property
  def prefix(self) -> str:
    return f"episodes/{self.tmdb_id}/s{self.season_number:02d}e{self.episode_number:02d}"


def audio_key(episode: EpisodeRef, kind: str, text: str) -> str:
  """Return the storage key for one item; the same text always maps to the same key."""
  return f"{episode.prefix}/{kind}/{slugify(text)}.mp3"


@dataclass(frozen=True)
class SynthesizedAudio:
  vocabulary: list[ExtractedVocabulary]
  expressions: list[ExtractedExpression]
  exercises: list[GeneratedExercise]


class AudioSynthesisStage:
  """Synthesizes and uploads audio for vocabulary, expressions and listening exercises."""

  def __init__(self, synthesizer: SpeechSynthesizer, storage: AudioStorage, *, concurrency: int = 10) -> None:
    self._synthesizer = synthesizer
    self._storage = storage
    self._concurrency = concurrency

  async def _synthesize_to(self, key: str, text: str) -> str:
    audio = await self._synthesizer.synthesize(text)
    return await self._storage.upload(key, audio, AUDIO_CONTENT_TYPE)

  async def synthesize_item(self, episode: EpisodeRef, kind: str, text: str) -> str:
    """Synthesize one clip under its deterministic key and return the public URL."""
    return await self._synthesize_to(audio_key(episode, kind, text), text)

  async def run(self, episode: EpisodeRef, vocabulary: Sequence[ExtractedVocabulary], expressions: Sequence[ExtractedExpression], exercises: Sequence[GeneratedExercise]) -> SynthesizedAudio:
    """Attach an audio URL to each item; any failure fails the whole stage."""
    semaphore = asyncio.Semaphore(self._concurrency)

    async def _limited(call: Callable[[], Awaitable[T]]) -> T:
      async with semaphore:
        return await call()

    def _job(kind: str, text: str) -> Callable[[], Awaitable[str]]:
      return lambda: self.synthesize_item(episode, kind, text)

    calls: list[Callable[[], Awaitable[str]]] = []
    calls.extend(_job("vocab", item.term) for item in vocabulary)
    calls.extend(_job("expr", item.phrase) for item in expressions)
    listening_indexes = [index for index, exercise in enumerate(exercises) if isinstance(exercise, ListeningExercise)]
    calls.extend(_job("listening", exercises[index].correct_answer) for index in listening_indexes)

    logger.info("Synthesizing %d audio clip(s) for %s", len(calls), episode.prefix)
    results = await asyncio.gather(*(_limited(call) for call in calls), return_exceptions=True)
    failures = [result for result in results if isinstance(result, BaseException)]
    if failures:
      logger.error("Audio synthesis failed for %d of %d clip(s)", len(failures), len(calls))
      raise failures[0]

    urls: list[str] = list(results)  # type: ignore[arg-type]
    vocab_urls = urls[: len(vocabulary)]
    expr_urls = urls[len(vocabulary) : len(vocabulary) + len(expressions)]
    listening_urls = dict(zip(listening_indexes, urls[len(vocabulary) + len(expressions) :], strict=True))

    return SynthesizedAudio(
      vocabulary=[item.model_copy(update={"audio_url": url}) for item, url in zip(vocabulary, vocab_urls, strict=True)],
      expressions=[item.model_copy(update={"audio_url": url}) for item, url in zip(expressions, expr_urls, strict=True)],
      exercises=[exercise.model_copy(update={"audio_url": listening_urls[index]}) if index in listening_urls else exercise for index, exercise in enumerate(exercises)],
    )

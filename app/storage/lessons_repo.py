"""Persistence port for finished lessons."""

from __future__ import annotations

import asyncio
from typing import Protocol

from app.core.exceptions import EpisodeNotFoundError
from app.schema.generation import GeneratedLesson
from app.utils.ids import generate_episode_id


class LessonRepository(Protocol):
  """Repository contract for generated lessons."""

  async def save(self, lesson: GeneratedLesson) -> str:
    """Persist a lesson and return the new episode id."""

  async def get(self, episode_id: str) -> GeneratedLesson | None:
    """Fetch a lesson by episode id."""

  async def update(self, episode_id: str, lesson: GeneratedLesson) -> None:
    """Replace a stored lesson; unknown ids raise EpisodeNotFoundError."""


class InMemoryLessonRepository:
  """Process-local lesson repository."""

  def __init__(self) -> None:
    self._lessons: dict[str, GeneratedLesson] = {}
    self._lock = asyncio.Lock()

  async def save(self, lesson: GeneratedLesson) -> str:
    episode_id = generate_episode_id()
    async with self._lock:
      self._lessons[episode_id] = lesson
    return episode_id

  async def get(self, episode_id: str) -> GeneratedLesson | None:
    async with self._lock:
      return self._lessons.get(episode_id)

  async def update(self, episode_id: str, lesson: GeneratedLesson) -> None:
    async with self._lock:
      if episode_id not in self._lessons:
        raise EpisodeNotFoundError(episode_id)
      self._lessons[episode_id] = lesson

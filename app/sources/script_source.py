"""Resolves an episode to script text from subtitles or, failing that, transcription."""

from __future__ import annotations

import logging

from app.ai.providers.whisper import TranscriptionAdapter
from app.core.exceptions import ExternalCallTimeout, ExternalServiceError, MalformedResponseError, ScriptUnavailable
from app.schema.generation import Script, ScriptSource
from app.sources.episode_audio import EpisodeAudioSource
from app.sources.opensubtitles import OpenSubtitlesClient
from app.sources.tmdb import EpisodeMetadata, TmdbClient
from app.storage.script_cache import InMemoryScriptCache, ScriptCacheKey

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (ExternalServiceError, ExternalCallTimeout, MalformedResponseError)


class ScriptSourceAdapter:
  """
  Fetch the script for one episode.

  Subtitles are tried first, through the cache. When no subtitle is
  published the episode audio is transcribed instead. Transcription errors
  propagate unchanged so the job records them as such.
  """

  def __init__(self, *, tmdb: TmdbClient, subtitles: OpenSubtitlesClient, cache: InMemoryScriptCache, audio: EpisodeAudioSource, transcriber: TranscriptionAdapter | None, language: str = "en") -> None:
    self._tmdb = tmdb
    self._subtitles = subtitles
    self._cache = cache
    self._audio = audio
    self._transcriber = transcriber
    self._language = language

  async def fetch_script(self, tmdb_id: str, season_number: int, episode_number: int) -> Script:
    try:
      metadata = await self._tmdb.get_episode_metadata(tmdb_id, season_number, episode_number)
    except _LOOKUP_ERRORS as exc:
      raise ScriptUnavailable(f"Could not resolve metadata for TMDB {tmdb_id} S{season_number:02d}E{episode_number:02d}: {exc}") from exc

    subtitle = await self._subtitle_text(metadata)
    if subtitle:
      return self._script(metadata, subtitle, ScriptSource.SUBTITLES)

    transcript = await self._transcribe(metadata)
    if transcript:
      return self._script(metadata, transcript, ScriptSource.TRANSCRIBED)

    raise ScriptUnavailable(f"No subtitles or audio available for {metadata.imdb_id} S{season_number:02d}E{episode_number:02d}")

  async def _subtitle_text(self, metadata: EpisodeMetadata) -> str | None:
    key = ScriptCacheKey(imdb_id=metadata.imdb_id, season_number=metadata.season_number, episode_number=metadata.episode_number, language=self._language)
    cached = await self._cache.get(key)
    if cached:
      logger.info("Script cache hit for %s S%02dE%02d", metadata.imdb_id, metadata.season_number, metadata.episode_number)
      return cached

    try:
      content = await self._subtitles.fetch_subtitle(metadata.imdb_id, metadata.season_number, metadata.episode_number, self._language)
    except _LOOKUP_ERRORS as exc:
      # Subtitle lookups are best effort; transcription is the fallback.
      logger.warning("Subtitle lookup failed for %s S%02dE%02d: %s", metadata.imdb_id, metadata.season_number, metadata.episode_number, exc)
      return None

    if content and content.strip():
      await self._cache.put(key, content)
      return content
    return None

  async def _transcribe(self, metadata: EpisodeMetadata) -> str | None:
    if self._transcriber is None or not self._audio.enabled:
      return None
    try:
      audio = await self._audio.fetch_audio(tmdb_id=metadata.tmdb_id, imdb_id=metadata.imdb_id, season_number=metadata.season_number, episode_number=metadata.episode_number)
    except _LOOKUP_ERRORS as exc:
      raise ScriptUnavailable(f"Episode audio could not be fetched: {exc}") from exc
    if audio is None:
      return None

    logger.info("Transcribing episode audio for %s S%02dE%02d", metadata.imdb_id, metadata.season_number, metadata.episode_number)
    hint = ", ".join(part for part in (metadata.show_title, metadata.episode_title) if part) or None
    return await self._transcriber.transcribe(audio.data, audio.filename, hint, content_type=audio.content_type)

  def _script(self, metadata: EpisodeMetadata, text: str, source: ScriptSource) -> Script:
    return Script(tmdb_id=metadata.tmdb_id, imdb_id=metadata.imdb_id, season_number=metadata.season_number, episode_number=metadata.episode_number, text=text, source=source, language=self._language, show_title=metadata.show_title, episode_title=metadata.episode_title)

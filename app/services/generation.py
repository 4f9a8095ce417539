"""Builds the generation orchestrator and its collaborators from settings."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from google import genai

from app.ai.agents import ExerciseGenerator, ExpressionExtractor, GrammarExtractor, VocabularyExtractor
from app.ai.backoff import RetryPolicy
from app.ai.providers.gemini import GeminiJsonGenerator, GeminiSpeechSynthesizer, build_gemini_client
from app.ai.providers.whisper import TranscriptionAdapter
from app.audio.regeneration import AudioRegenerationService
from app.audio.synthesis import AudioSynthesisStage
from app.config import Settings
from app.jobs.orchestrator import GenerationOrchestrator
from app.services.storage_client import build_audio_storage
from app.sources.episode_audio import EpisodeAudioSource
from app.sources.opensubtitles import OpenSubtitlesClient
from app.sources.script_source import ScriptSourceAdapter
from app.sources.tmdb import TmdbClient
from app.storage.lessons_repo import InMemoryLessonRepository, LessonRepository
from app.storage.memory_jobs_repo import InMemoryJobStore
from app.storage.script_cache import InMemoryScriptCache

logger = logging.getLogger(__name__)


def _require(value: str | None, name: str) -> str:
  if not value:
    raise ValueError(f"{name} must be set to run lesson generation.")
  return value


def build_audio_stage(settings: Settings, *, retry: RetryPolicy | None = None, gemini: genai.Client | None = None) -> AudioSynthesisStage:
  retry = retry or RetryPolicy.from_settings(settings)
  gemini = gemini or build_gemini_client(settings.gemini_api_key)
  return AudioSynthesisStage(GeminiSpeechSynthesizer(gemini, model=settings.tts_model, voice=settings.tts_voice, retry=retry), build_audio_storage(settings), concurrency=settings.audio_concurrency)


def build_audio_regeneration(settings: Settings, lessons: LessonRepository) -> AudioRegenerationService:
  """Regeneration reuses the synthesis stage so keys match the original run."""
  return AudioRegenerationService(build_audio_stage(settings), lessons, concurrency=settings.audio_concurrency)


def build_orchestrator(settings: Settings, http_client: httpx.AsyncClient, *, lessons: LessonRepository | None = None) -> GenerationOrchestrator:
  """Wire every adapter once; the storage backend is fixed for the process."""
  retry = RetryPolicy.from_settings(settings)
  gemini = build_gemini_client(settings.gemini_api_key)
  generator = GeminiJsonGenerator(gemini, model=settings.extraction_model, retry=retry)

  transcriber = None
  if settings.openai_api_key:
    transcriber = TranscriptionAdapter(http_client, api_key=settings.openai_api_key, base_url=settings.openai_base_url, retry=retry, model=settings.transcription_model)
  else:
    logger.warning("OPENAI_API_KEY not set; transcription fallback disabled")

  script_source = ScriptSourceAdapter(
    tmdb=TmdbClient(http_client, api_key=_require(settings.tmdb_api_key, "TMDB_API_KEY"), base_url=settings.tmdb_base_url, retry=retry),
    subtitles=OpenSubtitlesClient(http_client, api_key=_require(settings.opensubtitles_api_key, "OPENSUBTITLES_API_KEY"), base_url=settings.opensubtitles_base_url, user_agent=settings.opensubtitles_user_agent, retry=retry),
    cache=InMemoryScriptCache(timedelta(days=settings.script_cache_ttl_days)),
    audio=EpisodeAudioSource(http_client, url_template=settings.episode_audio_url_template, retry=retry),
    transcriber=transcriber,
    language=settings.subtitle_language,
  )
  audio = build_audio_stage(settings, retry=retry, gemini=gemini)

  return GenerationOrchestrator(
    job_store=InMemoryJobStore(),
    script_source=script_source,
    vocabulary=VocabularyExtractor(generator, max_script_chars=settings.script_max_chars),
    grammar=GrammarExtractor(generator, max_script_chars=settings.script_max_chars),
    expressions=ExpressionExtractor(generator, max_script_chars=settings.script_max_chars),
    exercises=ExerciseGenerator(generator, max_script_chars=settings.script_max_chars),
    audio=audio,
    lessons=lessons or InMemoryLessonRepository(),
    job_deadline_seconds=settings.job_deadline_seconds,
  )


@asynccontextmanager
async def generation_runtime(settings: Settings) -> AsyncIterator[GenerationOrchestrator]:
  """Yield a ready orchestrator; in-flight jobs finish before the HTTP client closes."""
  async with httpx.AsyncClient(timeout=httpx.Timeout(settings.external_call_timeout_seconds), trust_env=False) as http_client:
    orchestrator = build_orchestrator(settings, http_client)
    try:
      yield orchestrator
    finally:
      await orchestrator.join()
      logger.info("Generation runtime shut down")

"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from app.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

StorageBackend = Literal["local", "gcs"]


@dataclass(frozen=True)
class Settings:
  """Typed settings for the LearnTV generation engine."""

  environment: str
  debug: bool
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  storage_backend: StorageBackend
  local_audio_dir: str
  local_audio_base_url: str
  audio_bucket: str | None
  audio_public_base_url: str | None
  gcs_storage_host: str | None
  gcp_project_id: str | None
  gemini_api_key: str | None
  extraction_model: str
  tts_model: str
  tts_voice: str
  openai_api_key: str | None
  openai_base_url: str
  transcription_model: str
  tmdb_api_key: str | None
  tmdb_base_url: str
  opensubtitles_api_key: str | None
  opensubtitles_base_url: str
  opensubtitles_user_agent: str
  subtitle_language: str
  episode_audio_url_template: str | None
  retry_max_retries: int
  retry_base_delay_seconds: float
  external_call_timeout_seconds: float
  script_cache_ttl_days: int
  script_max_chars: int
  audio_concurrency: int
  job_deadline_seconds: int | None


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _parse_optional_int(raw: str | None, name: str) -> int | None:
  if raw is None or raw.strip() == "":
    return None

  value = int(raw)

  if value <= 0:
    raise ValueError(f"{name} must be positive when provided.")

  return value


def _parse_positive_int(raw: str | None, default: int, name: str, *, allow_zero: bool = False) -> int:
  value = int(raw) if raw not in (None, "") else default
  if value < 0 or (value == 0 and not allow_zero):
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _parse_positive_float(raw: str | None, default: float, name: str) -> float:
  value = float(raw) if raw not in (None, "") else default
  if value <= 0:
    raise ValueError(f"{name} must be a positive number.")
  return value


def _parse_storage_backend(raw: str | None) -> StorageBackend:
  backend = (raw or "local").strip().lower()
  if backend not in {"local", "gcs"}:
    raise ValueError("LEARNTV_STORAGE_BACKEND must be 'local' or 'gcs'.")
  return backend  # type: ignore[return-value]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("LEARNTV_ENV", "development").lower()
  debug = _parse_bool(os.getenv("LEARNTV_DEBUG"))

  log_max_bytes = _parse_positive_int(os.getenv("LEARNTV_LOG_MAX_BYTES"), 5242880, "LEARNTV_LOG_MAX_BYTES")  # 5MB default
  log_backup_count = _parse_positive_int(os.getenv("LEARNTV_LOG_BACKUP_COUNT"), 10, "LEARNTV_LOG_BACKUP_COUNT", allow_zero=True)

  storage_backend = _parse_storage_backend(os.getenv("LEARNTV_STORAGE_BACKEND"))
  audio_bucket = _optional_str(os.getenv("LEARNTV_AUDIO_BUCKET"))
  # The cloud backend cannot pick a bucket on its own.
  if storage_backend == "gcs" and not audio_bucket:
    raise ValueError("LEARNTV_AUDIO_BUCKET must be set when LEARNTV_STORAGE_BACKEND is 'gcs'.")

  retry_max_retries = _parse_positive_int(os.getenv("LEARNTV_RETRY_MAX_RETRIES"), 3, "LEARNTV_RETRY_MAX_RETRIES", allow_zero=True)
  retry_base_delay_seconds = _parse_positive_float(os.getenv("LEARNTV_RETRY_BASE_DELAY_SECONDS"), 2.0, "LEARNTV_RETRY_BASE_DELAY_SECONDS")
  external_call_timeout_seconds = _parse_positive_float(os.getenv("LEARNTV_EXTERNAL_CALL_TIMEOUT_SECONDS"), 60.0, "LEARNTV_EXTERNAL_CALL_TIMEOUT_SECONDS")

  return Settings(
    environment=environment,
    debug=debug,
    log_dir=(os.getenv("LEARNTV_LOG_DIR") or "logs").strip(),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    storage_backend=storage_backend,
    local_audio_dir=(os.getenv("LEARNTV_LOCAL_AUDIO_DIR") or "./audio").strip(),
    local_audio_base_url=(os.getenv("LEARNTV_LOCAL_AUDIO_BASE_URL") or "http://localhost:8080/audio").strip(),
    audio_bucket=audio_bucket,
    audio_public_base_url=_optional_str(os.getenv("LEARNTV_AUDIO_PUBLIC_BASE_URL")),
    gcs_storage_host=_optional_str(os.getenv("GCS_STORAGE_HOST")),
    gcp_project_id=_optional_str(os.getenv("GCP_PROJECT_ID")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    extraction_model=os.getenv("LEARNTV_EXTRACTION_MODEL", "gemini-2.5-flash"),
    tts_model=os.getenv("LEARNTV_TTS_MODEL", "gemini-2.5-flash-preview-tts"),
    tts_voice=os.getenv("LEARNTV_TTS_VOICE", "Kore"),
    openai_api_key=_optional_str(os.getenv("OPENAI_API_KEY")),
    openai_base_url=(os.getenv("LEARNTV_OPENAI_BASE_URL") or "https://api.openai.com/v1").strip(),
    transcription_model=os.getenv("LEARNTV_TRANSCRIPTION_MODEL", "whisper-1"),
    tmdb_api_key=_optional_str(os.getenv("TMDB_API_KEY")),
    tmdb_base_url=(os.getenv("LEARNTV_TMDB_BASE_URL") or "https://api.themoviedb.org/3").strip(),
    opensubtitles_api_key=_optional_str(os.getenv("OPENSUBTITLES_API_KEY")),
    opensubtitles_base_url=(os.getenv("LEARNTV_OPENSUBTITLES_BASE_URL") or "https://api.opensubtitles.com/api/v1").strip(),
    opensubtitles_user_agent=os.getenv("LEARNTV_OPENSUBTITLES_USER_AGENT", "LearnTV v1.0"),
    subtitle_language=os.getenv("LEARNTV_SUBTITLE_LANGUAGE", "en").strip().lower(),
    episode_audio_url_template=_optional_str(os.getenv("LEARNTV_EPISODE_AUDIO_URL_TEMPLATE")),
    retry_max_retries=retry_max_retries,
    retry_base_delay_seconds=retry_base_delay_seconds,
    external_call_timeout_seconds=external_call_timeout_seconds,
    script_cache_ttl_days=_parse_positive_int(os.getenv("LEARNTV_SCRIPT_CACHE_TTL_DAYS"), 30, "LEARNTV_SCRIPT_CACHE_TTL_DAYS"),
    script_max_chars=_parse_positive_int(os.getenv("LEARNTV_SCRIPT_MAX_CHARS"), 15000, "LEARNTV_SCRIPT_MAX_CHARS"),
    audio_concurrency=_parse_positive_int(os.getenv("LEARNTV_AUDIO_CONCURRENCY"), 10, "LEARNTV_AUDIO_CONCURRENCY"),
    job_deadline_seconds=_parse_optional_int(os.getenv("LEARNTV_JOB_DEADLINE_SECONDS"), "LEARNTV_JOB_DEADLINE_SECONDS"),
  )

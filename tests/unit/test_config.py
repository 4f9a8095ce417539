from __future__ import annotations

import os

import pytest

from app.config import get_settings
from app.services.storage_client import build_audio_storage
from app.storage.local_audio_storage import LocalAudioStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
  for name in list(os.environ):
    if name.startswith("LEARNTV_"):
      monkeypatch.delenv(name)
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


def test_defaults() -> None:
  settings = get_settings()
  assert settings.storage_backend == "local"
  assert settings.retry_max_retries == 3
  assert settings.retry_base_delay_seconds == 2.0
  assert settings.script_cache_ttl_days == 30
  assert settings.audio_concurrency == 10
  assert settings.job_deadline_seconds is None


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LEARNTV_DEBUG", "yes")
  monkeypatch.setenv("LEARNTV_RETRY_MAX_RETRIES", "0")
  monkeypatch.setenv("LEARNTV_JOB_DEADLINE_SECONDS", "900")
  monkeypatch.setenv("LEARNTV_SUBTITLE_LANGUAGE", " EN ")
  settings = get_settings()
  assert settings.debug is True
  assert settings.retry_max_retries == 0
  assert settings.job_deadline_seconds == 900
  assert settings.subtitle_language == "en"


def test_gcs_backend_requires_a_bucket(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LEARNTV_STORAGE_BACKEND", "gcs")
  with pytest.raises(ValueError, match="LEARNTV_AUDIO_BUCKET"):
    get_settings()


@pytest.mark.parametrize(("name", "value"), [("LEARNTV_STORAGE_BACKEND", "s3"), ("LEARNTV_AUDIO_CONCURRENCY", "0"), ("LEARNTV_RETRY_BASE_DELAY_SECONDS", "-1"), ("LEARNTV_JOB_DEADLINE_SECONDS", "-5")])
def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
  monkeypatch.setenv(name, value)
  with pytest.raises(ValueError):
    get_settings()


def test_local_backend_is_built_from_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  monkeypatch.setenv("LEARNTV_LOCAL_AUDIO_DIR", str(tmp_path))
  monkeypatch.setenv("LEARNTV_LOCAL_AUDIO_BASE_URL", "http://cdn.test/audio")
  storage = build_audio_storage(get_settings())
  assert isinstance(storage, LocalAudioStorage)
  assert storage.root == tmp_path.resolve()
  assert storage.get_public_url("a.mp3") == "http://cdn.test/audio/a.mp3"

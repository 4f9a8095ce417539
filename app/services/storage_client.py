"""Selects the audio storage backend from configuration."""

from __future__ import annotations

import logging

from app.config import Settings
from app.storage.audio_storage import AudioStorage
from app.storage.gcs_audio_storage import GcsAudioStorage, build_gcs_client
from app.storage.local_audio_storage import LocalAudioStorage

logger = logging.getLogger(__name__)


def build_audio_storage(settings: Settings) -> AudioStorage:
  """Create the configured storage backend; called once at wiring time."""
  if settings.storage_backend == "gcs":
    if not settings.audio_bucket:
      raise ValueError("LEARNTV_AUDIO_BUCKET must be set for the gcs storage backend.")
    client = build_gcs_client(project_id=settings.gcp_project_id, storage_host=settings.gcs_storage_host)
    logger.info("Audio storage: gcs bucket=%s", settings.audio_bucket)
    return GcsAudioStorage(client, settings.audio_bucket, public_base_url=settings.audio_public_base_url, timeout_seconds=settings.external_call_timeout_seconds)
  logger.info("Audio storage: local dir=%s", settings.local_audio_dir)
  return LocalAudioStorage(settings.local_audio_dir, settings.local_audio_base_url)

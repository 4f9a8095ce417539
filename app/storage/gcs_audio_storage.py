"""Audio storage in a Google Cloud Storage bucket."""

from __future__ import annotations

import logging
import os
from urllib.parse import urlparse, urlunparse

from google.api_core import exceptions as gcs_exceptions
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage
from google.cloud.storage.retry import DEFAULT_RETRY
from starlette.concurrency import run_in_threadpool

from app.core.exceptions import StorageError
from app.storage.audio_storage import AUDIO_CONTENT_TYPE, join_url

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CONTROL = "public, max-age=31536000"


class GcsAudioStorage:
  """Thin wrapper over GCS and emulator access for audio objects."""

  def __init__(self, client: storage.Client, bucket_name: str, *, public_base_url: str | None = None, timeout_seconds: float = 60.0) -> None:
    self._client = client
    self._bucket_name = bucket_name
    self._public_base_url = public_base_url or f"https://storage.googleapis.com/{bucket_name}"
    self._timeout_seconds = timeout_seconds
    # SDK retries stop once the external-call budget is spent.
    self._retry = DEFAULT_RETRY.with_timeout(timeout_seconds)

  async def upload(self, key: str, data: bytes, content_type: str = AUDIO_CONTENT_TYPE) -> str:
    blob = self._client.bucket(self._bucket_name).blob(key)
    blob.cache_control = DEFAULT_CACHE_CONTROL
    # Object writes are atomic; an existing object is replaced.
    try:
      await run_in_threadpool(blob.upload_from_string, data, content_type=content_type, timeout=self._timeout_seconds, retry=self._retry)
    except gcs_exceptions.GoogleAPIError as exc:
      raise StorageError(key, exc) from exc
    logger.debug("Uploaded %d bytes to gs://%s/%s", len(data), self._bucket_name, key)
    return self.get_public_url(key)

  async def delete(self, key: str) -> None:
    blob = self._client.bucket(self._bucket_name).blob(key)
    try:
      await run_in_threadpool(blob.delete, timeout=self._timeout_seconds, retry=self._retry)
    except gcs_exceptions.NotFound:
      logger.warning("Audio object not found for deletion: gs://%s/%s", self._bucket_name, key)
    except gcs_exceptions.GoogleAPIError as exc:
      raise StorageError(key, exc) from exc

  def get_public_url(self, key: str) -> str:
    return join_url(self._public_base_url, key)


def build_gcs_client(*, project_id: str | None, storage_host: str | None) -> storage.Client:
  """Create a storage client, pointing at the emulator when a host is configured."""
  if storage_host:
    emulator_endpoint = _normalize_emulator_endpoint(storage_host)
    # Ensure emulator endpoint is visible to the SDK in local development.
    os.environ["STORAGE_EMULATOR_HOST"] = emulator_endpoint
    return storage.Client(project=project_id or "local-dev", credentials=AnonymousCredentials(), client_options={"api_endpoint": emulator_endpoint})
  return storage.Client(project=project_id)


def _normalize_emulator_endpoint(raw_endpoint: str) -> str:
  """Normalize emulator endpoint so the SDK receives scheme+host+port only."""
  parsed = urlparse(raw_endpoint)
  if not parsed.scheme or not parsed.netloc:
    return raw_endpoint.rstrip("/")
  return urlunparse((parsed.scheme, parsed.netloc, "", "", "", "")).rstrip("/")

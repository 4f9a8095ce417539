"""Audio storage on the local filesystem, served from a static base URL."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from app.core.exceptions import StorageError
from app.storage.audio_storage import AUDIO_CONTENT_TYPE, join_url

logger = logging.getLogger(__name__)


class LocalAudioStorage:
  """Writes objects under a root directory; keys map to relative paths."""

  def __init__(self, root_dir: str | Path, base_url: str) -> None:
    self._root = Path(root_dir).resolve()
    self._base_url = base_url

  @property
  def root(self) -> Path:
    return self._root

  def _resolve(self, key: str) -> Path:
    """Map a key to a path under the root, rejecting keys that escape it."""
    if not key or not key.strip("/"):
      raise StorageError(key, "key must not be empty")
    path = (self._root / key.lstrip("/")).resolve()
    if not path.is_relative_to(self._root):
      raise StorageError(key, "key resolves outside the storage root")
    return path

  async def upload(self, key: str, data: bytes, content_type: str = AUDIO_CONTENT_TYPE) -> str:
    path = self._resolve(key)
    try:
      await run_in_threadpool(_atomic_write, path, data)
    except OSError as exc:
      raise StorageError(key, exc) from exc
    logger.debug("Stored %d bytes at %s (%s)", len(data), path, content_type)
    return self.get_public_url(key)

  async def delete(self, key: str) -> None:
    path = self._resolve(key)
    try:
      await run_in_threadpool(path.unlink)
    except FileNotFoundError:
      logger.warning("Audio file not found for deletion: %s", key)
    except OSError as exc:
      raise StorageError(key, exc) from exc

  def get_public_url(self, key: str) -> str:
    return join_url(self._base_url, key)


def _atomic_write(path: Path, data: bytes) -> None:
  """Write to a sibling temp file, then rename over the target."""
  path.parent.mkdir(parents=True, exist_ok=True)
  fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
  try:
    with os.fdopen(fd, "wb") as handle:
      handle.write(data)
    os.replace(tmp_name, path)
  except BaseException:
    Path(tmp_name).unlink(missing_ok=True)
    raise

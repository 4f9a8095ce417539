"""Storage port for synthesized audio objects."""

from __future__ import annotations

from typing import Protocol

AUDIO_CONTENT_TYPE = "audio/mpeg"


class AudioStorage(Protocol):
  """Contract shared by the local-disk and object-store backends."""

  async def upload(self, key: str, data: bytes, content_type: str = AUDIO_CONTENT_TYPE) -> str:
    """Write data under key, replacing any existing object, and return its public URL."""

  async def delete(self, key: str) -> None:
    """Remove the object under key; a missing object is not an error."""

  def get_public_url(self, key: str) -> str:
    """Return the public URL for key without touching the backend."""


def join_url(base_url: str, key: str) -> str:
  """Join a base URL and an object key with exactly one slash."""
  return f"{base_url.rstrip('/')}/{key.lstrip('/')}"

"""Episode audio download used when no subtitle file exists."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.ai.backoff import RetryPolicy
from app.core.exceptions import ExternalServiceError
from app.utils.http import send

logger = logging.getLogger(__name__)

SERVICE = "episode-audio"


@dataclass(frozen=True)
class EpisodeAudio:
  data: bytes
  filename: str
  content_type: str


class EpisodeAudioSource:
  """
  Downloads episode audio from a URL template.

  The template may use {tmdb_id}, {imdb_id}, {season} and {episode}. With no
  template configured the source never has audio.
  """

  def __init__(self, client: httpx.AsyncClient, *, url_template: str | None, retry: RetryPolicy) -> None:
    self._client = client
    self._url_template = url_template
    self._retry = retry

  @property
  def enabled(self) -> bool:
    return bool(self._url_template)

  async def fetch_audio(self, *, tmdb_id: str, imdb_id: str, season_number: int, episode_number: int) -> EpisodeAudio | None:
    """Return the episode audio, or None when it is not published."""
    if not self._url_template:
      return None
    url = self._url_template.format(tmdb_id=tmdb_id, imdb_id=imdb_id, season=season_number, episode=episode_number)
    try:
      response = await self._retry.call("episode audio download", send, SERVICE, self._client, "GET", url)
    except ExternalServiceError as exc:
      if exc.status_code == 404:
        logger.info("No episode audio at %s", url)
        return None
      raise
    if not response.content:
      return None
    content_type = response.headers.get("content-type", "audio/mpeg").split(";")[0].strip()
    filename = url.rsplit("/", 1)[-1].split("?")[0] or f"s{season_number:02d}e{episode_number:02d}.mp3"
    return EpisodeAudio(data=response.content, filename=filename, content_type=content_type)

"""TMDB v3 metadata lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.ai.backoff import RetryPolicy
from app.core.exceptions import MalformedResponseError
from app.utils.http import json_body, send

logger = logging.getLogger(__name__)

SERVICE = "tmdb"


@dataclass(frozen=True)
class EpisodeMetadata:
  """Identifiers and titles needed to locate a script."""

  tmdb_id: str
  imdb_id: str
  show_title: str | None
  season_number: int
  episode_number: int
  episode_title: str | None


class TmdbClient:
  """Resolves a TMDB show/season/episode triple to IMDB metadata."""

  def __init__(self, client: httpx.AsyncClient, *, api_key: str, base_url: str, retry: RetryPolicy, language: str = "en-US") -> None:
    self._client = client
    self._api_key = api_key
    self._base_url = base_url.rstrip("/")
    self._retry = retry
    self._language = language

  async def _get_json(self, path: str, **params: Any) -> dict[str, Any]:
    query = {"api_key": self._api_key, "language": self._language, **params}
    response = await self._retry.call(f"tmdb GET {path}", send, SERVICE, self._client, "GET", f"{self._base_url}{path}", params=query)
    body = json_body(SERVICE, response)
    if not isinstance(body, dict):
      raise MalformedResponseError(f"tmdb returned an unexpected body for {path}")
    return body

  async def get_episode_metadata(self, tmdb_id: str, season_number: int, episode_number: int) -> EpisodeMetadata:
    """Look up the IMDB id and confirm the episode exists in the season listing."""
    show = await self._get_json(f"/tv/{tmdb_id}", append_to_response="external_ids")
    imdb_id = (show.get("external_ids") or {}).get("imdb_id")
    if not imdb_id:
      raise MalformedResponseError(f"No IMDB id found for TMDB show {tmdb_id}")

    season = await self._get_json(f"/tv/{tmdb_id}/season/{season_number}")
    episode = next((item for item in season.get("episodes") or [] if item.get("episode_number") == episode_number), None)
    if episode is None:
      raise MalformedResponseError(f"Episode S{season_number:02d}E{episode_number:02d} not listed for TMDB show {tmdb_id}")

    logger.debug("Resolved TMDB %s S%02dE%02d to IMDB %s", tmdb_id, season_number, episode_number, imdb_id)
    return EpisodeMetadata(tmdb_id=tmdb_id, imdb_id=imdb_id, show_title=show.get("name"), season_number=season_number, episode_number=episode_number, episode_title=episode.get("name"))

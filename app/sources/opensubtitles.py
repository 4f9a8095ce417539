"""OpenSubtitles REST v1 search and download."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.ai.backoff import RetryPolicy
from app.core.exceptions import MalformedResponseError
from app.utils.http import json_body, send

logger = logging.getLogger(__name__)

SERVICE = "opensubtitles"


def normalize_imdb_id(imdb_id: str) -> str:
  """OpenSubtitles expects the tt-prefixed form."""
  return imdb_id if imdb_id.startswith("tt") else f"tt{imdb_id}"


def _json_object(response: httpx.Response, what: str) -> dict[str, Any]:
  body = json_body(SERVICE, response)
  if not isinstance(body, dict):
    raise MalformedResponseError(f"opensubtitles returned an unexpected {what} body")
  return body


def select_best_subtitle(results: list[dict[str, Any]]) -> dict[str, Any] | None:
  """Prefer human-made subtitles without hearing-impaired cues, else the first result."""
  for result in results:
    attributes = result.get("attributes")
    if not isinstance(attributes, dict) or not attributes:
      continue
    if attributes.get("ai_translated") or attributes.get("machine_translated") or attributes.get("hearing_impaired"):
      continue
    return result
  return results[0] if results else None


def _first_file_id(result: dict[str, Any] | None) -> Any:
  attributes = (result or {}).get("attributes")
  files = attributes.get("files") if isinstance(attributes, dict) else None
  if not isinstance(files, list) or not files or not isinstance(files[0], dict):
    return None
  return files[0].get("file_id")


class OpenSubtitlesClient:
  """Finds and downloads the most popular subtitle file for an episode."""

  def __init__(self, client: httpx.AsyncClient, *, api_key: str, base_url: str, user_agent: str, retry: RetryPolicy) -> None:
    self._client = client
    self._base_url = base_url.rstrip("/")
    self._retry = retry
    self._headers = {"Api-Key": api_key, "User-Agent": user_agent, "Accept": "application/json"}

  async def fetch_subtitle(self, imdb_id: str, season_number: int, episode_number: int, language: str) -> str | None:
    """Return raw subtitle text, or None when nothing usable is published."""
    logger.info("Fetching subtitle for IMDB %s S%02dE%02d (%s)", imdb_id, season_number, episode_number, language)
    params = {"imdb_id": normalize_imdb_id(imdb_id), "season_number": season_number, "episode_number": episode_number, "languages": language, "order_by": "download_count", "order_direction": "desc"}
    response = await self._retry.call("opensubtitles search", send, SERVICE, self._client, "GET", f"{self._base_url}/subtitles", params=params, headers=self._headers)
    data = _json_object(response, "search").get("data") or []
    if not isinstance(data, list):
      raise MalformedResponseError("opensubtitles search data is not a list")
    results = [item for item in data if isinstance(item, dict)]

    best = select_best_subtitle(results)
    file_id = _first_file_id(best)
    if file_id is None:
      logger.warning("No subtitle files found for IMDB %s S%02dE%02d", imdb_id, season_number, episode_number)
      return None

    logger.debug("Selected subtitle file %s (release=%s)", file_id, best["attributes"].get("release"))
    response = await self._retry.call("opensubtitles download", send, SERVICE, self._client, "POST", f"{self._base_url}/download", json={"file_id": file_id}, headers=self._headers)
    link = _json_object(response, "download").get("link")
    if not isinstance(link, str) or not link:
      logger.error("No download link returned for subtitle file %s", file_id)
      return None

    response = await self._retry.call("opensubtitles content", send, SERVICE, self._client, "GET", link)
    content = response.text
    logger.info("Fetched subtitle for IMDB %s S%02dE%02d, %d chars", imdb_id, season_number, episode_number, len(content))
    return content or None

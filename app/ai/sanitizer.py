"""Cleaning for untrusted text before it is placed into model prompts."""

from __future__ import annotations

import re

ALLOWED_GENRES = frozenset({"drama", "comedy", "thriller", "scifi", "crime", "horror", "romance", "action", "animation", "documentary", "fantasy", "mystery", "adventure", "western"})
DEFAULT_GENRE = "drama"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_NON_LETTERS = re.compile(r"[^a-z]")
_SCRIPT_FENCE_TAGS = re.compile(r"<\s*/?\s*script-content\s*>", re.IGNORECASE)


def sanitize_genre(genre: str | None) -> str:
  """Map a free-form genre onto the whitelist, defaulting to drama."""
  if genre is None or not genre.strip():
    return DEFAULT_GENRE
  normalized = _NON_LETTERS.sub("", genre.strip().lower())
  return normalized if normalized in ALLOWED_GENRES else DEFAULT_GENRE


def sanitize_short_input(value: str | None, max_length: int) -> str:
  """Flatten a short value onto one line and cap its length."""
  if value is None or not value.strip():
    return ""
  cleaned = _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", value)).strip()
  return cleaned[:max_length]


def wrap_script_content(script: str | None, max_chars: int) -> str:
  """Truncate a script and fence it so the model treats it as data."""
  if script is None or not script.strip():
    return "<script-content>\n</script-content>"
  # The script must not be able to open or close the fence itself.
  body = _SCRIPT_FENCE_TAGS.sub("", script[:max_chars])
  return f"<script-content>\n{body}\n</script-content>"

"""Turns SubRip subtitle files into clean dialogue text."""

from __future__ import annotations

import re

import srt

_SEQUENCE_NUMBER = re.compile(r"^\d+$")
_TIMESTAMP = re.compile(r"^\d{2}:\d{2}:\d{2}[,.]\d{3}\s*-->\s*\d{2}:\d{2}:\d{2}[,.]\d{3}.*$")
_HTML_TAGS = re.compile(r"<[^>]+>")
_ASS_CODES = re.compile(r"\{\\[^}]+\}")
# A whole line like [music playing] or (door slams).
_HEARING_IMPAIRED = re.compile(r"^[\[(][^\])]+[\])]$")
_SPEAKER_LABEL = re.compile(r"^[A-Z][A-Z\s.]+:\s*")
_MUSIC_NOTES = re.compile(r"[♪♫]")
_INLINE_BRACKETS = re.compile(r"\[[^\]]+\]")
_INLINE_PARENS = re.compile(r"\([^)]+\)")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION_ONLY = re.compile(r"^[-\s.?!,]+$")
_LINE_BREAK = re.compile(r"\r?\n")


def _is_cue_metadata(line: str) -> bool:
  return bool(_SEQUENCE_NUMBER.match(line) or _TIMESTAMP.match(line))


def clean_line(line: str) -> str:
  """Return the dialogue in one subtitle line, or "" when nothing is left."""
  trimmed = line.strip()
  if not trimmed or _is_cue_metadata(trimmed) or _HEARING_IMPAIRED.match(trimmed):
    return ""

  cleaned = _HTML_TAGS.sub("", trimmed)
  cleaned = _ASS_CODES.sub("", cleaned)
  cleaned = _MUSIC_NOTES.sub("", cleaned)
  cleaned = _SPEAKER_LABEL.sub("", cleaned)
  cleaned = _INLINE_BRACKETS.sub("", cleaned)
  cleaned = _INLINE_PARENS.sub("", cleaned)
  cleaned = _WHITESPACE.sub(" ", cleaned).strip()

  if len(cleaned) < 2 or _PUNCTUATION_ONLY.match(cleaned):
    return ""
  return cleaned


def _cues(srt_content: str) -> list[list[str]]:
  """Cleaned dialogue lines of each cue, skipping cues with nothing left."""
  cues: list[list[str]] = []
  for subtitle in srt.parse(srt_content, ignore_errors=True):
    lines = [cleaned for cleaned in (clean_line(line) for line in _LINE_BREAK.split(subtitle.content)) if cleaned]
    if lines:
      cues.append(lines)
  return cues


def parse_preserving_groups(srt_content: str | None) -> str:
  """
  Keep each subtitle cue together on one line, separating cues with a blank line.

  Multi-line cues are joined with spaces so a sentence split across two
  subtitle lines stays whole.
  """
  if srt_content is None or not srt_content.strip():
    return ""
  return "\n\n".join(" ".join(cue) for cue in _cues(srt_content)).strip()


def looks_like_srt(content: str) -> bool:
  """True when any line is an SRT timestamp."""
  return any(_TIMESTAMP.match(line.strip()) for line in _LINE_BREAK.split(content))


def normalize_transcript(text: str) -> str:
  """Collapse runs of spaces in a transcript while keeping paragraph breaks."""
  paragraphs = (_WHITESPACE.sub(" ", paragraph).strip() for paragraph in re.split(r"\n\s*\n", text))
  return "\n\n".join(paragraph for paragraph in paragraphs if paragraph)

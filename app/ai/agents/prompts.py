"""Prompt helpers shared by the extraction stages."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from app.ai.sanitizer import sanitize_short_input, wrap_script_content
from app.schema.generation import ExtractedExpression, ExtractedGrammar, ExtractedVocabulary

MAX_FIELD_LENGTH = 500


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)
  return rendered


@lru_cache(maxsize=8)
def _load_prompt(name: str) -> str:
  try:
    path = Path(__file__).parents[1] / "prompts" / name
    return path.read_text(encoding="utf-8").strip()
  except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
    raise RuntimeError(f"Failed to load prompt '{name}': {exc}") from exc


def render_vocabulary_prompts(script_text: str, genre: str, max_chars: int) -> tuple[str, str]:
  system = _replace_placeholders(_load_prompt("vocabulary.md"), {"GENRE": genre})
  user = f"Genre: {genre}\n\nExtract vocabulary from this episode:\n\n{wrap_script_content(script_text, max_chars)}"
  return system, user


def render_grammar_prompts(script_text: str, max_chars: int) -> tuple[str, str]:
  user = f"Extract grammar points from this episode:\n\n{wrap_script_content(script_text, max_chars)}"
  return _load_prompt("grammar.md"), user


def render_expression_prompts(script_text: str, max_chars: int) -> tuple[str, str]:
  user = f"Extract expressions and idioms from this episode:\n\n{wrap_script_content(script_text, max_chars)}"
  return _load_prompt("expressions.md"), user


def _clean(value: str | None) -> str:
  return sanitize_short_input(value, MAX_FIELD_LENGTH)


def render_exercise_prompts(vocabulary: Sequence[ExtractedVocabulary], grammar: Sequence[ExtractedGrammar], expressions: Sequence[ExtractedExpression]) -> tuple[str, str]:
  """Summarise the extracted content, one sanitized line per item."""
  lines = ["<lesson-content>", "VOCABULARY:"]
  lines.extend(f"- {_clean(item.term)}: {_clean(item.definition)}" for item in vocabulary)
  lines.append("")
  lines.append("GRAMMAR POINTS:")
  lines.extend(f"- {_clean(item.title)}: {_clean(item.structure or item.explanation)}" for item in grammar)
  lines.append("")
  lines.append("EXPRESSIONS:")
  lines.extend(f"- {_clean(item.phrase)}: {_clean(item.meaning)}" for item in expressions)
  lines.append("</lesson-content>")
  user = "Write exercises for this lesson content:\n\n" + "\n".join(lines)
  return _load_prompt("exercises.md"), user

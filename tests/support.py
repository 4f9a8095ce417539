"""Payload builders and fakes shared by the unit tests."""

from __future__ import annotations

from typing import Any


def vocabulary_payload(count: int = 15) -> dict[str, Any]:
  return {"vocabulary": [{"term": f"word {index}", "definition": f"meaning {index}", "phonetic": "/wɜːd/", "category": "colloquial", "exampleSentence": f"Use word {index}.", "audioUrl": None} for index in range(count)]}


def grammar_payload(count: int = 4) -> dict[str, Any]:
  return {"grammar": [{"title": f"Pattern {index}", "explanation": "When to use it.", "structure": "subject + verb", "examples": ["I have been there."]} for index in range(count)]}


def expressions_payload(count: int = 6) -> dict[str, Any]:
  return {"expressions": [{"phrase": f"break a leg {index}", "meaning": "good luck", "context": "Before a show.", "usageNote": "Informal."} for index in range(count)]}


def exercises_payload(choice: int = 10, listening: int = 2) -> dict[str, Any]:
  exercises: list[dict[str, Any]] = [{"type": "MULTIPLE_CHOICE", "question": f"Question {index}?", "correctAnswer": "a", "options": ["a", "b", "c", "d"], "points": 2} for index in range(choice)]
  exercises.extend({"type": "LISTENING", "question": "Listen and type what you hear", "correctAnswer": f"word {index}", "options": None, "points": 1} for index in range(listening))
  exercises.append({"type": "MATCHING", "question": "Match the terms", "correctAnswer": None, "options": None, "matchingPairs": [{"term": "a", "definition": "x"}, {"term": "b", "definition": "y"}], "points": 3})
  return {"exercises": exercises}


class FakeJsonGenerator:
  """Returns canned payloads keyed by the array each stage asks for."""

  def __init__(self, payloads: dict[str, dict[str, Any]] | None = None) -> None:
    self.payloads = payloads or {**vocabulary_payload(), **grammar_payload(), **expressions_payload(), **exercises_payload()}
    self.calls: list[tuple[str, str]] = []

  async def generate_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    self.calls.append((system_prompt, user_prompt))
    for key in ("exercises", "vocabulary", "grammar", "expressions"):
      if f'"{key}" array' in system_prompt:
        return {key: self.payloads[key]}
    raise AssertionError("Unrecognised prompt")


class FakeSpeechSynthesizer:
  def __init__(self) -> None:
    self.texts: list[str] = []

  async def synthesize(self, text: str) -> bytes:
    self.texts.append(text)
    return f"mp3:{text}".encode()

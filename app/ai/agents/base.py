"""Base class for the extraction stages."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from app.ai.providers.base import JsonGenerator
from app.core.exceptions import MalformedResponseError

OutputT = TypeVar("OutputT")

logger = logging.getLogger(__name__)


class BaseStage(ABC, Generic[OutputT]):
  """Stage that asks the JSON generator for one array and validates its items."""

  name: str
  root_key: str

  def __init__(self, generator: JsonGenerator, *, max_script_chars: int = 15000) -> None:
    self._generator = generator
    self._max_script_chars = max_script_chars

  @abstractmethod
  async def run(self, *args: Any) -> list[OutputT]:
    """Run the stage and return its validated items."""

  async def _generate(self, system_prompt: str, user_prompt: str, adapter: TypeAdapter[list[OutputT]]) -> list[OutputT]:
    payload = await self._generator.generate_json(system_prompt, user_prompt)
    items = payload.get(self.root_key)
    if not isinstance(items, list):
      raise MalformedResponseError(f"{self.name} response is missing the '{self.root_key}' array")
    try:
      parsed = adapter.validate_python(items)
    except ValidationError as exc:
      logger.error("%s response failed validation: %s", self.name, exc.errors(include_input=False))
      raise MalformedResponseError(f"{self.name} response failed validation: {exc.error_count()} error(s)") from exc
    logger.info("%s produced %d item(s)", self.name, len(parsed))
    return parsed

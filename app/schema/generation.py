"""Value objects exchanged between the generation stages."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, computed_field, field_validator, model_validator

from app.ai.sanitizer import sanitize_genre


def _to_camel(string: str) -> str:
  """Convert snake_case to camelCase so model output and API payloads share one shape."""
  parts = string.split("_")
  if not parts:
    return string
  return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


class _ValueModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True, extra="ignore", alias_generator=_to_camel, frozen=True)


class VocabularyCategory(str, Enum):
  """Categories a vocabulary term can be filed under."""

  MEDICAL = "medical"
  TECHNICAL = "technical"
  SLANG = "slang"
  IDIOM = "idiom"
  PROFESSIONAL = "professional"
  EVERYDAY = "everyday"
  EMOTIONAL = "emotional"
  COLLOQUIAL = "colloquial"
  ACTION = "action"


class ScriptSource(str, Enum):
  """Where the script text came from."""

  SUBTITLES = "SUBTITLES"
  TRANSCRIBED = "TRANSCRIBED"


class GenerationCommand(_ValueModel):
  """Request to generate a lesson for one episode."""

  tmdb_id: StrictStr = Field(min_length=1, description="TMDB identifier of the show.")
  season_number: int = Field(gt=0)
  episode_number: int = Field(gt=0)
  genre: str = Field(default="drama", description="Show genre, normalised onto the supported list.")

  @field_validator("tmdb_id")
  @classmethod
  def _strip_tmdb_id(cls, value: str) -> str:
    stripped = value.strip()
    if not stripped:
      raise ValueError("tmdb_id must not be blank")
    return stripped

  @field_validator("genre", mode="before")
  @classmethod
  def _normalize_genre(cls, value: object) -> str:
    return sanitize_genre(value if isinstance(value, str) else None)


class Script(_ValueModel):
  """Raw script text for one episode."""

  tmdb_id: str
  imdb_id: str | None = None
  season_number: int
  episode_number: int
  text: str
  source: ScriptSource
  language: str = "en"
  show_title: str | None = None
  episode_title: str | None = None


class ExtractedVocabulary(_ValueModel):
  """A vocabulary term pulled from the script."""

  term: StrictStr = Field(min_length=1)
  definition: StrictStr = Field(min_length=1)
  phonetic: str | None = None
  category: VocabularyCategory = VocabularyCategory.EVERYDAY
  example_sentence: str | None = None
  audio_url: str | None = None

  @field_validator("category", mode="before")
  @classmethod
  def _coerce_category(cls, value: object) -> VocabularyCategory:
    # Unknown categories are filed as everyday rather than rejecting the whole batch.
    if isinstance(value, VocabularyCategory):
      return value
    if isinstance(value, str):
      try:
        return VocabularyCategory(value.strip().lower())
      except ValueError:
        pass
    return VocabularyCategory.EVERYDAY


class ExtractedGrammar(_ValueModel):
  """A grammar point with examples taken from the script."""

  title: StrictStr = Field(min_length=1)
  explanation: StrictStr = Field(min_length=1)
  structure: str | None = None
  examples: list[str] = Field(default_factory=list)


class ExtractedExpression(_ValueModel):
  """An idiom or fixed expression used in the episode."""

  phrase: StrictStr = Field(min_length=1)
  meaning: StrictStr = Field(min_length=1)
  context: str | None = None
  usage_note: str | None = None
  audio_url: str | None = None


class MatchingPair(_ValueModel):
  term: StrictStr = Field(min_length=1)
  definition: StrictStr = Field(min_length=1)


class ChoiceExercise(_ValueModel):
  """Fill-in-the-blank or multiple-choice exercise."""

  type: Literal["FILL_IN_BLANK", "MULTIPLE_CHOICE"]
  question: StrictStr = Field(min_length=1)
  correct_answer: StrictStr = Field(min_length=1)
  options: list[str] = Field(min_length=2)
  points: int = Field(default=1, gt=0)

  @model_validator(mode="after")
  def _answer_is_an_option(self) -> ChoiceExercise:
    normalized = {option.strip().lower() for option in self.options}
    if self.correct_answer.strip().lower() not in normalized:
      raise ValueError("correct_answer must be one of the options")
    return self


class MatchingExercise(_ValueModel):
  """Match terms with their definitions."""

  type: Literal["MATCHING"]
  question: StrictStr = Field(min_length=1)
  matching_pairs: list[MatchingPair] = Field(min_length=2)
  points: int = Field(default=1, gt=0)


class ListeningExercise(_ValueModel):
  """Type-what-you-hear exercise backed by a synthesized clip."""

  type: Literal["LISTENING"]
  question: StrictStr = Field(min_length=1)
  correct_answer: StrictStr = Field(min_length=1)
  audio_url: str | None = None
  points: int = Field(default=1, gt=0)


GeneratedExercise = Annotated[ChoiceExercise | MatchingExercise | ListeningExercise, Field(discriminator="type")]


class GeneratedLesson(_ValueModel):
  """The complete lesson handed to the lesson repository."""

  tmdb_id: str
  imdb_id: str | None = None
  season_number: int
  episode_number: int
  genre: str
  script_source: ScriptSource
  vocabulary: list[ExtractedVocabulary]
  grammar: list[ExtractedGrammar]
  expressions: list[ExtractedExpression]
  exercises: list[GeneratedExercise]

  @computed_field  # type: ignore[prop-decorator]
  @property
  def total_points(self) -> int:
    return sum(exercise.points for exercise in self.exercises)

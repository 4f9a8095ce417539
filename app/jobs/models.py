"""Domain models for asynchronous lesson generation jobs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum

from app.utils.ids import generate_job_id


class GenerationStatus(str, Enum):
  """Lifecycle states of a generation job."""

  PENDING = "PENDING"
  RUNNING = "RUNNING"
  COMPLETED = "COMPLETED"
  FAILED = "FAILED"


TERMINAL_STATUSES = frozenset({GenerationStatus.COMPLETED, GenerationStatus.FAILED})


@dataclass(frozen=True)
class ProgressStep:
  """One row of the fixed progress table."""

  name: str
  progress: int
  description: str


# Ordered; each stage reports its row on entry.
PROGRESS_STEPS: tuple[ProgressStep, ...] = (
  ProgressStep("FETCHING_SCRIPT", 10, "Fetching script"),
  ProgressStep("PARSING_SCRIPT", 20, "Parsing script"),
  ProgressStep("EXTRACTING_VOCABULARY", 40, "Extracting vocabulary..."),
  ProgressStep("EXTRACTING_GRAMMAR", 55, "Extracting grammar..."),
  ProgressStep("EXTRACTING_EXPRESSIONS", 70, "Extracting expressions..."),
  ProgressStep("GENERATING_EXERCISES", 85, "Generating exercises..."),
  ProgressStep("SAVING", 95, "Saving..."),
  ProgressStep("COMPLETED", 100, "Completed"),
)
STEPS_BY_NAME: dict[str, ProgressStep] = {step.name: step for step in PROGRESS_STEPS}
VALID_PROGRESS_VALUES = frozenset({0} | {step.progress for step in PROGRESS_STEPS})


def step(name: str) -> ProgressStep:
  """Look up a progress step by name."""
  try:
    return STEPS_BY_NAME[name]
  except KeyError as exc:
    raise ValueError(f"Unknown progress step: {name}") from exc


def _utc_now() -> datetime:
  return datetime.now(UTC)


@dataclass(frozen=True)
class GenerationJob:
  """Immutable snapshot of a generation job; transitions return new instances."""

  job_id: str
  status: GenerationStatus
  progress: int
  current_step: str | None
  created_at: datetime
  error_message: str | None = None
  episode_id: str | None = None
  completed_at: datetime | None = None

  @classmethod
  def create(cls, job_id: str | None = None) -> GenerationJob:
    return cls(job_id=job_id or generate_job_id(), status=GenerationStatus.PENDING, progress=0, current_step=None, created_at=_utc_now())

  @property
  def is_terminal(self) -> bool:
    return self.status in TERMINAL_STATUSES

  @property
  def is_successful(self) -> bool:
    return self.status is GenerationStatus.COMPLETED

  def enter_step(self, progress_step: ProgressStep) -> GenerationJob:
    """Move to a later step; progress never goes backwards."""
    if self.is_terminal:
      raise ValueError(f"Job {self.job_id} is already {self.status.value}")
    if not 0 <= progress_step.progress <= 100:
      raise ValueError("Progress must be between 0 and 100")
    if progress_step.progress < self.progress:
      raise ValueError(f"Progress cannot decrease from {self.progress} to {progress_step.progress}")
    return replace(self, status=GenerationStatus.RUNNING, progress=progress_step.progress, current_step=progress_step.description)

  def mark_completed(self, episode_id: str) -> GenerationJob:
    if not episode_id:
      raise ValueError("episode_id is required to complete a job")
    if self.is_terminal:
      raise ValueError(f"Job {self.job_id} is already {self.status.value}")
    completed = STEPS_BY_NAME["COMPLETED"]
    return replace(self, status=GenerationStatus.COMPLETED, progress=completed.progress, current_step=completed.description, episode_id=episode_id, error_message=None, completed_at=_utc_now())

  def mark_failed(self, reason: str) -> GenerationJob:
    """Fail the job, keeping the progress and step it reached."""
    if self.is_terminal:
      raise ValueError(f"Job {self.job_id} is already {self.status.value}")
    return replace(self, status=GenerationStatus.FAILED, error_message=reason or "Generation failed", completed_at=_utc_now())

"""Error taxonomy shared by adapters, stages and the generation orchestrator."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
  """Broad failure categories used to build job error messages."""

  TRANSIENT_EXTERNAL = "transient_external"
  PERMANENT_EXTERNAL = "permanent_external"
  TIMEOUT = "timeout"
  SCRIPT_UNAVAILABLE = "script_unavailable"
  TRANSCRIPTION_FAILED = "transcription_failed"
  STORAGE = "storage"
  CONTENT = "content"
  VALIDATION = "validation"
  NOT_FOUND = "not_found"
  INTERNAL = "internal"


def is_retryable_status(status_code: int | None) -> bool:
  """Only rate limiting (429) and server-side failures (5xx) are worth another attempt."""
  return status_code is not None and (status_code == 429 or status_code >= 500)


class GenerationError(RuntimeError):
  """Base class for every domain failure raised by the engine."""

  kind: ErrorKind = ErrorKind.INTERNAL


class ExternalServiceError(GenerationError):
  """Raised when a remote service answers with a non-success status."""

  def __init__(self, service: str, status_code: int | None, message: str) -> None:
    super().__init__(f"{service} returned {status_code}: {message}" if status_code is not None else f"{service}: {message}")
    self.service = service
    self.status_code = status_code
    self.detail = message

  @property
  def kind(self) -> ErrorKind:  # type: ignore[override]
    return ErrorKind.TRANSIENT_EXTERNAL if is_retryable_status(self.status_code) else ErrorKind.PERMANENT_EXTERNAL


class ExternalCallTimeout(GenerationError):
  """Raised when an external call, retries included, exceeds its time budget."""

  kind = ErrorKind.TIMEOUT

  def __init__(self, operation: str, timeout_seconds: float) -> None:
    super().__init__(f"{operation} timed out after {timeout_seconds:g}s")
    self.operation = operation
    self.timeout_seconds = timeout_seconds


class MalformedResponseError(GenerationError):
  """Raised when a service answers successfully with content we cannot use."""

  kind = ErrorKind.PERMANENT_EXTERNAL


class ScriptUnavailable(GenerationError):
  """Raised when no script can be obtained for an episode."""

  kind = ErrorKind.SCRIPT_UNAVAILABLE


class TranscriptionFailed(GenerationError):
  """Raised when speech-to-text yields no usable text."""

  kind = ErrorKind.TRANSCRIPTION_FAILED


class StorageError(GenerationError):
  """Raised when an audio object cannot be written or removed."""

  kind = ErrorKind.STORAGE

  def __init__(self, key: str, cause: BaseException | str) -> None:
    super().__init__(f"Storage operation failed for key '{key}': {cause}")
    self.key = key
    self.cause = cause


class LessonContentError(GenerationError):
  """Raised when extracted content falls below the lesson minimums."""

  kind = ErrorKind.CONTENT


class InvalidGenerationCommand(GenerationError):
  """Raised when a start request fails validation."""

  kind = ErrorKind.VALIDATION


class JobNotFoundError(GenerationError):
  """Raised when a job id was never issued."""

  kind = ErrorKind.NOT_FOUND

  def __init__(self, job_id: str) -> None:
    super().__init__(f"Generation job not found: {job_id}")
    self.job_id = job_id


class EpisodeNotFoundError(GenerationError):
  """Raised when an episode id has no stored lesson."""

  kind = ErrorKind.NOT_FOUND

  def __init__(self, episode_id: str) -> None:
    super().__init__(f"Episode not found: {episode_id}")
    self.episode_id = episode_id

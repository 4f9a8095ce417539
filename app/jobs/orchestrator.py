"""Drives a generation job through the fixed stage sequence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from app.ai.agents import ExerciseGenerator, ExpressionExtractor, GrammarExtractor, VocabularyExtractor
from app.audio.synthesis import AudioSynthesisStage, EpisodeRef
from app.core.exceptions import ErrorKind, GenerationError, InvalidGenerationCommand, JobNotFoundError, ScriptUnavailable
from app.jobs.lesson_composer import LessonComposer
from app.jobs.models import GenerationJob
from app.jobs.progress import JobProgressTracker
from app.schema.generation import ExtractedExpression, ExtractedGrammar, ExtractedVocabulary, GeneratedExercise, GenerationCommand, Script, ScriptSource
from app.sources.script_source import ScriptSourceAdapter
from app.sources.srt_parser import looks_like_srt, normalize_transcript, parse_preserving_groups
from app.storage.jobs_repo import JobStore
from app.storage.lessons_repo import LessonRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageFailure:
  """Outcome of a stage that raised; the job loop turns it into the job's error message."""

  step: str
  kind: ErrorKind
  message: str


@dataclass
class _JobContext:
  """Mutable per-job state handed from stage to stage."""

  command: GenerationCommand
  script: Script | None = None
  dialogue: str = ""
  vocabulary: list[ExtractedVocabulary] = field(default_factory=list)
  grammar: list[ExtractedGrammar] = field(default_factory=list)
  expressions: list[ExtractedExpression] = field(default_factory=list)
  exercises: list[GeneratedExercise] = field(default_factory=list)
  episode_id: str | None = None


def describe_failure(failure: StageFailure) -> str:
  """Build the human-readable error message stored on a failed job."""
  match failure.kind:
    case ErrorKind.SCRIPT_UNAVAILABLE:
      return f"Script unavailable: {failure.message}"
    case ErrorKind.TRANSCRIPTION_FAILED:
      return f"Transcription failed: {failure.message}"
    case ErrorKind.TRANSIENT_EXTERNAL:
      return f"External service still failing after retries: {failure.message}"
    case ErrorKind.PERMANENT_EXTERNAL:
      return f"External service error: {failure.message}"
    case ErrorKind.TIMEOUT:
      return f"External call timed out: {failure.message}"
    case ErrorKind.STORAGE:
      return f"Audio storage failed: {failure.message}"
    case ErrorKind.CONTENT:
      return failure.message
    case _:
      return f"Unexpected error during {failure.step}: {failure.message}"


class GenerationOrchestrator:
  """
  Runs lesson generation jobs as background asyncio tasks.

  start_generation returns the PENDING job immediately. The task writes a new
  snapshot to the job store on entry to each step, so pollers see progress
  move forward through the fixed table. A failing stage stops the job; nothing
  after it runs and nothing is persisted.
  """

  def __init__(
    self,
    *,
    job_store: JobStore,
    script_source: ScriptSourceAdapter,
    vocabulary: VocabularyExtractor,
    grammar: GrammarExtractor,
    expressions: ExpressionExtractor,
    exercises: ExerciseGenerator,
    audio: AudioSynthesisStage,
    lessons: LessonRepository,
    composer: LessonComposer | None = None,
    job_deadline_seconds: float | None = None,
  ) -> None:
    self._job_store = job_store
    self._script_source = script_source
    self._vocabulary = vocabulary
    self._grammar = grammar
    self._expressions = expressions
    self._exercises = exercises
    self._audio = audio
    self._lessons = lessons
    self._composer = composer or LessonComposer()
    self._job_deadline_seconds = job_deadline_seconds
    self._tasks: set[asyncio.Task[None]] = set()

  async def start_generation(self, command: GenerationCommand | Mapping[str, Any]) -> GenerationJob:
    """Validate, store a PENDING job and schedule it; never waits on network I/O."""
    if not isinstance(command, GenerationCommand):
      try:
        command = GenerationCommand.model_validate(command)
      except ValidationError as exc:
        raise InvalidGenerationCommand(f"Invalid generation request: {exc.error_count()} error(s): {exc.errors(include_input=False, include_url=False)}") from exc

    job = GenerationJob.create()
    await self._job_store.put(job)
    logger.info("Queued generation job %s for TMDB %s S%02dE%02d", job.job_id, command.tmdb_id, command.season_number, command.episode_number)

    task = asyncio.create_task(self._run_job(job, command), name=f"generation-{job.job_id}")
    # Hold a reference so the task is not garbage collected mid-run.
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)
    task.add_done_callback(self._log_task_error)
    return job

  async def get_status(self, job_id: str) -> GenerationJob:
    job = await self._job_store.get(job_id)
    if job is None:
      raise JobNotFoundError(job_id)
    return job

  async def join(self) -> None:
    """Wait for every in-flight job to finish."""
    while self._tasks:
      await asyncio.gather(*list(self._tasks), return_exceptions=True)

  @staticmethod
  def _log_task_error(task: asyncio.Task[None]) -> None:
    """Log background task exceptions to avoid silent job loss."""
    if task.cancelled():
      logger.warning("Generation task %s was cancelled", task.get_name())
      return
    exc = task.exception()
    if exc is not None:
      logger.error("Generation task %s crashed: %s", task.get_name(), exc, exc_info=exc)

  async def _run_job(self, job: GenerationJob, command: GenerationCommand) -> None:
    tracker = JobProgressTracker(job=job, job_store=self._job_store)
    context = _JobContext(command=command)
    if self._job_deadline_seconds is None:
      await self._run_pipeline(tracker, context)
      return
    try:
      await asyncio.wait_for(self._run_pipeline(tracker, context), timeout=self._job_deadline_seconds)
    except asyncio.TimeoutError:
      if not tracker.job.is_terminal:
        await tracker.fail(f"Generation exceeded the deadline of {self._job_deadline_seconds:g}s")

  def _stages(self, context: _JobContext) -> list[tuple[str, Callable[[], Awaitable[None]]]]:
    """Ordered (step, work) pairs; the order matches the progress table."""
    return [
      ("FETCHING_SCRIPT", lambda: self._fetch_script(context)),
      ("PARSING_SCRIPT", lambda: self._parse_script(context)),
      ("EXTRACTING_VOCABULARY", lambda: self._extract_vocabulary(context)),
      ("EXTRACTING_GRAMMAR", lambda: self._extract_grammar(context)),
      ("EXTRACTING_EXPRESSIONS", lambda: self._extract_expressions(context)),
      ("GENERATING_EXERCISES", lambda: self._generate_exercises(context)),
      ("SAVING", lambda: self._save(context)),
    ]

  async def _run_pipeline(self, tracker: JobProgressTracker, context: _JobContext) -> None:
    for step_name, work in self._stages(context):
      await tracker.enter(step_name)
      failure = await self._run_stage(step_name, work)
      if failure is not None:
        await tracker.fail(describe_failure(failure))
        return
    if context.episode_id is None:
      await tracker.fail("Lesson was not persisted")
      return
    await tracker.complete(context.episode_id)

  async def _run_stage(self, step_name: str, work: Callable[[], Awaitable[None]]) -> StageFailure | None:
    """Run one stage, converting any exception into a StageFailure."""
    try:
      await work()
    except GenerationError as exc:
      logger.warning("Stage %s failed (%s): %s", step_name, exc.kind.value, exc, exc_info=True)
      return StageFailure(step=step_name, kind=exc.kind, message=str(exc))
    except Exception as exc:  # noqa: BLE001
      logger.error("Stage %s crashed: %s", step_name, exc, exc_info=True)
      return StageFailure(step=step_name, kind=ErrorKind.INTERNAL, message=f"{type(exc).__name__}: {exc}")
    return None

  async def _fetch_script(self, context: _JobContext) -> None:
    command = context.command
    context.script = await self._script_source.fetch_script(command.tmdb_id, command.season_number, command.episode_number)

  async def _parse_script(self, context: _JobContext) -> None:
    script = context.script
    if script is None:
      raise ScriptUnavailable("No script was fetched")
    if script.source is ScriptSource.SUBTITLES and looks_like_srt(script.text):
      dialogue = parse_preserving_groups(script.text)
    else:
      dialogue = normalize_transcript(script.text)
    if not dialogue:
      raise ScriptUnavailable("Script contained no dialogue")
    context.dialogue = dialogue

  async def _extract_vocabulary(self, context: _JobContext) -> None:
    context.vocabulary = await self._vocabulary.run(context.dialogue, context.command.genre)

  async def _extract_grammar(self, context: _JobContext) -> None:
    context.grammar = await self._grammar.run(context.dialogue)

  async def _extract_expressions(self, context: _JobContext) -> None:
    context.expressions = await self._expressions.run(context.dialogue)

  async def _generate_exercises(self, context: _JobContext) -> None:
    context.exercises = await self._exercises.run(context.vocabulary, context.grammar, context.expressions)

  async def _save(self, context: _JobContext) -> None:
    """Validate, synthesize audio, then persist; the lesson is stored only if all three succeed."""
    if context.script is None:
      raise ScriptUnavailable("No script was fetched")
    self._composer.validate(context.vocabulary, context.grammar, context.expressions, context.exercises)
    command = context.command
    episode = EpisodeRef(tmdb_id=command.tmdb_id, season_number=command.season_number, episode_number=command.episode_number)
    audio = await self._audio.run(episode, context.vocabulary, context.expressions, context.exercises)
    lesson = self._composer.compose(context.script, command.genre, audio.vocabulary, context.grammar, audio.expressions, audio.exercises)
    context.episode_id = await self._lessons.save(lesson)

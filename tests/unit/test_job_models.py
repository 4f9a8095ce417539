from __future__ import annotations

import pytest

from app.core.exceptions import JobNotFoundError
from app.jobs.models import PROGRESS_STEPS, GenerationJob, GenerationStatus, step
from app.jobs.progress import JobProgressTracker
from app.storage.memory_jobs_repo import InMemoryJobStore


def test_progress_table_is_ordered_and_ends_at_100() -> None:
  values = [row.progress for row in PROGRESS_STEPS]
  assert values == sorted(values)
  assert [row.name for row in PROGRESS_STEPS][:2] == ["FETCHING_SCRIPT", "PARSING_SCRIPT"]
  assert PROGRESS_STEPS[-1].progress == 100
  assert step("EXTRACTING_GRAMMAR").progress == 55
  with pytest.raises(ValueError):
    step("NOPE")


def test_new_job_is_pending_at_zero() -> None:
  job = GenerationJob.create()
  assert job.status is GenerationStatus.PENDING
  assert job.progress == 0
  assert job.current_step is None
  assert job.error_message is None
  assert not job.is_terminal


def test_enter_step_is_monotonic() -> None:
  job = GenerationJob.create().enter_step(step("EXTRACTING_VOCABULARY"))
  assert job.status is GenerationStatus.RUNNING
  assert job.progress == 40
  assert job.current_step == "Extracting vocabulary..."
  with pytest.raises(ValueError):
    job.enter_step(step("PARSING_SCRIPT"))


def test_failure_keeps_progress_and_step() -> None:
  job = GenerationJob.create().enter_step(step("EXTRACTING_GRAMMAR")).mark_failed("boom")
  assert job.status is GenerationStatus.FAILED
  assert job.progress == 55
  assert job.current_step == "Extracting grammar..."
  assert job.error_message == "boom"
  assert job.completed_at is not None
  assert job.is_terminal and not job.is_successful


def test_completion_requires_episode_id() -> None:
  running = GenerationJob.create().enter_step(step("SAVING"))
  with pytest.raises(ValueError):
    running.mark_completed("")
  done = running.mark_completed("episode-1")
  assert (done.status, done.progress, done.episode_id) == (GenerationStatus.COMPLETED, 100, "episode-1")
  with pytest.raises(ValueError):
    done.mark_failed("late failure")


def test_transitions_do_not_mutate_the_original() -> None:
  job = GenerationJob.create()
  job.enter_step(step("FETCHING_SCRIPT"))
  assert job.progress == 0


@pytest.mark.anyio
async def test_job_store_round_trip_and_unknown_ids() -> None:
  store = InMemoryJobStore()
  job = GenerationJob.create()
  await store.put(job)
  assert await store.get(job.job_id) == job
  assert await store.get("missing") is None
  with pytest.raises(JobNotFoundError):
    await store.update_status(GenerationJob.create(job_id="missing"))


@pytest.mark.anyio
async def test_tracker_writes_each_step_before_returning() -> None:
  store = InMemoryJobStore()
  job = GenerationJob.create()
  await store.put(job)
  tracker = JobProgressTracker(job=job, job_store=store)

  await tracker.enter("FETCHING_SCRIPT")
  assert (await store.get(job.job_id)).progress == 10
  await tracker.enter("SAVING")
  await tracker.complete("episode-9")

  stored = await store.get(job.job_id)
  assert stored.status is GenerationStatus.COMPLETED
  assert stored.episode_id == "episode-9"

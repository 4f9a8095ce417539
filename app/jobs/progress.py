"""Job progress tracking against the fixed step table."""

from __future__ import annotations

import logging

from app.jobs.models import GenerationJob, step
from app.storage.jobs_repo import JobStore

logger = logging.getLogger(__name__)


class JobProgressTracker:
  """Owns the latest snapshot of one job and writes every transition to the store."""

  def __init__(self, *, job: GenerationJob, job_store: JobStore) -> None:
    self._job = job
    self._job_store = job_store

  @property
  def job(self) -> GenerationJob:
    return self._job

  async def _write(self, job: GenerationJob) -> GenerationJob:
    await self._job_store.update_status(job)
    self._job = job
    return job

  async def enter(self, step_name: str) -> GenerationJob:
    """Record entry into a step before any of its work starts."""
    progress_step = step(step_name)
    logger.info("Job %s: %s (%d%%)", self._job.job_id, progress_step.description, progress_step.progress)
    return await self._write(self._job.enter_step(progress_step))

  async def complete(self, episode_id: str) -> GenerationJob:
    logger.info("Job %s completed, episode_id=%s", self._job.job_id, episode_id)
    return await self._write(self._job.mark_completed(episode_id))

  async def fail(self, reason: str) -> GenerationJob:
    logger.error("Job %s failed at %d%%: %s", self._job.job_id, self._job.progress, reason)
    return await self._write(self._job.mark_failed(reason))

"""In-process job store backed by a dict of immutable snapshots."""

from __future__ import annotations

import asyncio
import logging

from app.core.exceptions import JobNotFoundError
from app.jobs.models import GenerationJob

logger = logging.getLogger(__name__)


class InMemoryJobStore:
  """Job store whose readers always see a complete snapshot."""

  def __init__(self) -> None:
    self._jobs: dict[str, GenerationJob] = {}
    self._lock = asyncio.Lock()

  async def put(self, job: GenerationJob) -> None:
    async with self._lock:
      if job.job_id in self._jobs:
        raise ValueError(f"Job {job.job_id} already exists")
      self._jobs[job.job_id] = job

  async def get(self, job_id: str) -> GenerationJob | None:
    async with self._lock:
      return self._jobs.get(job_id)

  async def update_status(self, job: GenerationJob) -> None:
    async with self._lock:
      if job.job_id not in self._jobs:
        raise JobNotFoundError(job.job_id)
      self._jobs[job.job_id] = job
    logger.debug("Job %s -> %s (%d%%, %s)", job.job_id, job.status.value, job.progress, job.current_step)

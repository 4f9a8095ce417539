"""Storage interfaces for generation jobs."""

from __future__ import annotations

from typing import Protocol

from app.jobs.models import GenerationJob


class JobStore(Protocol):
  """Repository contract for generation job snapshots."""

  async def put(self, job: GenerationJob) -> None:
    """Persist a new job snapshot."""

  async def get(self, job_id: str) -> GenerationJob | None:
    """Fetch the latest snapshot, or None for unknown ids."""

  async def update_status(self, job: GenerationJob) -> None:
    """Replace the stored snapshot of an existing job."""

"""Identifier utilities."""

from __future__ import annotations

import uuid


def generate_job_id() -> str:
  """Return a new job identifier."""
  return str(uuid.uuid4())


def generate_episode_id() -> str:
  """Return a new identifier for a persisted episode lesson."""
  return str(uuid.uuid4())

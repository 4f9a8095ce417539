"""Command-line entrypoint: generate one episode lesson and report its progress."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from app.config import get_settings
from app.core.exceptions import InvalidGenerationCommand
from app.core.logging import initialize_logging
from app.jobs.models import GenerationJob
from app.services.generation import generation_runtime

logger = logging.getLogger("app.main")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
  parser = argparse.ArgumentParser(description="Generate a language lesson for one TV episode.")
  parser.add_argument("--tmdb-id", required=True, help="TMDB show id")
  parser.add_argument("--season", type=int, required=True)
  parser.add_argument("--episode", type=int, required=True)
  parser.add_argument("--genre", default="drama")
  parser.add_argument("--poll-interval", type=float, default=1.0, help="Seconds between status polls")
  return parser.parse_args(argv)


async def _generate(args: argparse.Namespace) -> GenerationJob:
  settings = get_settings()
  initialize_logging(settings)
  async with generation_runtime(settings) as orchestrator:
    job = await orchestrator.start_generation({"tmdb_id": args.tmdb_id, "season_number": args.season, "episode_number": args.episode, "genre": args.genre})
    last_progress = -1
    while not job.is_terminal:
      await asyncio.sleep(args.poll_interval)
      job = await orchestrator.get_status(job.job_id)
      if job.progress != last_progress:
        logger.info("[%3d%%] %s", job.progress, job.current_step or job.status.value)
        last_progress = job.progress
    return job


def main(argv: list[str] | None = None) -> int:
  args = _parse_args(argv)
  try:
    job = asyncio.run(_generate(args))
  except InvalidGenerationCommand as exc:
    print(str(exc), file=sys.stderr)
    return 2
  if job.is_successful:
    print(f"Job {job.job_id} completed: episode_id={job.episode_id}")
    return 0
  print(f"Job {job.job_id} failed: {job.error_message}", file=sys.stderr)
  return 1


if __name__ == "__main__":
  sys.exit(main())

from __future__ import annotations

import logging
import sys

from app.core.logging import TruncatedFormatter, _rotated_name


def test_rotated_backup_names() -> None:
  assert _rotated_name("/logs/learntv_20260101_000000.log.3") == "/logs/learntv_20260101_000000.log-3"
  assert _rotated_name("/logs/learntv.log") == "/logs/learntv.log"


def _deep(depth: int) -> None:
  if depth == 0:
    raise ValueError("bottom")
  _deep(depth - 1)


def test_long_tracebacks_are_truncated() -> None:
  try:
    _deep(10)
  except ValueError:
    record = logging.LogRecord("app", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
  formatted = TruncatedFormatter("%(message)s").format(record)
  assert "    ...\n" in formatted
  assert formatted.rstrip().endswith("ValueError: bottom")

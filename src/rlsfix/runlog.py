"""Run log: one JSONL line per executed statement, one file per day and project.

Files live under ``~/.rlsfix/logs/<project-slug>/YYYY-MM-DD.jsonl``. The log
is an audit trail only; nothing reads it back.
"""

from __future__ import annotations

import contextlib
import json
import os
import uuid
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import click

from rlsfix.reconcile.report import ExecutionResult

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".rlsfix" / "logs"


def _project_slug() -> str:
    """Encode cwd into a directory-safe slug."""
    return os.getcwd().replace("/", "-").lstrip("-")


def _log_dir() -> Path:
    return _LOG_ROOT / _project_slug()


def _file_date(path: Path) -> date | None:
    try:
        return date.fromisoformat(path.stem)
    except ValueError:
        return None


class RunLog:
    """Appends the results of one run, tagged with a shared run id."""

    def __init__(self, *, descriptor: str, target: str, run_id: str | None = None) -> None:
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.descriptor = descriptor
        self.target = target
        self._broken = False

    def record(self, result: ExecutionResult) -> None:
        if self._broken:
            return
        now = datetime.now(UTC)
        entry = {
            "ts": now.isoformat(),
            "run_id": self.run_id,
            "descriptor": self.descriptor,
            "target": self.target,
            **result.to_dict(),
        }
        try:
            path = _log_dir() / f"{now.date().isoformat()}.jsonl"
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as e:
            # Logging stops; the batch keeps going.
            self._broken = True
            click.echo(f"warning: run log disabled: {e}", err=True)


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete this project's log files older than retention_days. Returns how many."""
    log_dir = _log_dir()
    if not log_dir.is_dir():
        return 0

    cutoff = datetime.now(UTC).date() - timedelta(days=retention_days)
    expired = []
    for path in log_dir.glob("*.jsonl"):
        day = _file_date(path)
        if day is not None and day < cutoff:
            path.unlink()
            expired.append(path)

    # Only succeeds when the directory is now empty.
    with contextlib.suppress(OSError):
        log_dir.rmdir()
    return len(expired)

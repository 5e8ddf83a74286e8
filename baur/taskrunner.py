"""Running the command of a task."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone

from baur.task import Task

_log = logging.getLogger(__name__)


@dataclass
class RunResult:
    """The outcome of running a task's command."""

    command: list[str]
    exit_code: int
    output: bytes
    start_time: datetime
    stop_time: datetime

    @property
    def str_output(self) -> str:
        """The combined stdout and stderr output as text."""
        return self.output.decode("utf-8", errors="replace")


class TaskRunner:
    """Executes task commands."""

    def run(self, task: Task) -> RunResult:
        """Run the command of task in its directory.

        A non-zero exit code is reported in the result, not raised. Raises
        ValueError for an empty command and OSError if it can not be started.
        """
        if not task.command:
            raise ValueError(f"{task}: command is empty")

        start = datetime.now(timezone.utc)
        proc = subprocess.run(
            list(task.command),
            cwd=task.directory or None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
        stop = datetime.now(timezone.utc)

        for line in proc.stdout.decode("utf-8", errors="replace").splitlines():
            _log.debug("%s: %s", task, line)

        return RunResult(
            command=list(task.command),
            exit_code=proc.returncode,
            output=proc.stdout,
            start_time=start,
            stop_time=stop,
        )
"""Determining whether a task has to be run."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from baur.inputresolver import InputResolver
from baur.inputs import Inputs, InputString, input_add_str_if_not_empty
from baur.task import Task, TaskStatus


class TaskRunNotFoundError(Exception):
    """No task run with the requested properties exists in the storage."""


class TaskRunStore(Protocol):
    """Storage that can be queried for recorded task runs."""

    def latest_task_run_by_digest(
        self, app_name: str, task_name: str, total_input_digest: str
    ) -> Any:
        """Return the latest run; raise TaskRunNotFoundError if there is none."""
        ...


class TaskStatusEvaluator:
    """Evaluates whether a run of a task with its current inputs is recorded."""

    def __init__(
        self,
        repository_dir: str,
        store: TaskRunStore,
        input_resolver: InputResolver,
        input_str: str = "",
        lookup_input_str: str = "",
    ) -> None:
        self.repository_dir = repository_dir
        self.store = store
        self.input_resolver = input_resolver
        self.input_str = input_str
        self.lookup_input_str = lookup_input_str

    def status(self, task: Task) -> tuple[TaskStatus, Inputs, Optional[Any]]:
        """Return the task status, its inputs and the recorded run, if any.

        If no run exists for the inputs and a lookup string is set, runs
        recorded with the lookup string instead of the input string are also
        accepted. The returned inputs always carry the input string. The run is
        None when the status is EXECUTION_PENDING.
        """
        input_files = self.input_resolver.resolve(self.repository_dir, task)

        inputs = Inputs(input_add_str_if_not_empty(input_files, self.input_str))
        status, run = self._task_status(inputs, task)

        if not self.lookup_input_str or status is not TaskStatus.EXECUTION_PENDING:
            return status, inputs, run

        lookup_inputs = Inputs([*input_files, InputString(self.lookup_input_str)])
        status, run = self._task_status(lookup_inputs, task)

        # The run is recorded with the input string, not the lookup string.
        return status, inputs, run

    def _task_status(self, inputs: Inputs, task: Task) -> tuple[TaskStatus, Optional[Any]]:
        total_digest = inputs.digest()
        try:
            run = self.store.latest_task_run_by_digest(
                task.app_name, task.name, str(total_digest)
            )
        except TaskRunNotFoundError:
            return TaskStatus.EXECUTION_PENDING, None
        return TaskStatus.RUN_EXIST, run
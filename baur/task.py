"""Tasks of applications and the configuration they are built from."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class FileInputs:
    """Glob paths of files that are inputs of a task."""

    paths: list[str] = field(default_factory=list)
    optional: bool = False
    git_tracked_only: bool = False


@dataclass
class TaskInputs:
    """The unresolved input definitions of a task."""

    files: list[FileInputs] = field(default_factory=list)


@dataclass
class S3Upload:
    """Destination of an upload to an S3 bucket."""

    bucket: str = ""
    key: str = ""


@dataclass
class FileCopy:
    """Destination directory of a file copy upload."""

    path: str = ""


@dataclass
class DockerImageRegistryUpload:
    """Destination of a docker image upload."""

    registry: str = ""
    repository: str = ""
    tag: str = ""


@dataclass
class DockerImageOutput:
    """A docker image produced by a task, identified by its image ID file."""

    id_file: str = ""
    registry_upload: list[DockerImageRegistryUpload] = field(default_factory=list)


@dataclass
class FileOutput:
    """A file produced by a task and where it is uploaded to."""

    path: str = ""
    s3_upload: list[S3Upload] = field(default_factory=list)
    file_copy: list[FileCopy] = field(default_factory=list)


@dataclass
class TaskOutputs:
    """The outputs a task produces."""

    docker_image: list[DockerImageOutput] = field(default_factory=list)
    file: list[FileOutput] = field(default_factory=list)


@dataclass
class Task:
    """An execution step of an app that turns inputs into outputs by running command."""

    repository_root: str = ""
    directory: str = ""
    app_name: str = ""
    name: str = ""
    command: list[str] = field(default_factory=list)
    unresolved_inputs: TaskInputs = field(default_factory=TaskInputs)
    outputs: TaskOutputs = field(default_factory=TaskOutputs)
    cfg_filepaths: list[str] = field(default_factory=list)

    def id(self) -> str:
        """Return '<APP-NAME>.<TASK-NAME>'."""
        return f"{self.app_name}.{self.name}"

    def __str__(self) -> str:
        return self.id()

    def has_inputs(self) -> bool:
        """Return True if inputs are defined for the task."""
        return bool(self.unresolved_inputs.files)

    def has_outputs(self) -> bool:
        """Return True if outputs are defined for the task."""
        return bool(self.outputs.docker_image) or bool(self.outputs.file)


def sort_tasks_by_id(tasks: list[Task]) -> None:
    """Sort tasks in place by their ID."""
    tasks.sort(key=Task.id)


class TaskStatus(enum.Enum):
    """Whether a run for a task with the current inputs exists."""

    UNDEFINED = 1
    RUN_EXIST = 2
    EXECUTION_PENDING = 3

    def __str__(self) -> str:
        return _TASK_STATUS_STRINGS[self]


_TASK_STATUS_STRINGS = {
    TaskStatus.UNDEFINED: "Undefined",
    TaskStatus.RUN_EXIST: "Exist",
    TaskStatus.EXECUTION_PENDING: "Pending",
}


def _task_ids(tasks: Iterable[Task]) -> list[str]:
    return [task.id() for task in tasks]
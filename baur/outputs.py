"""Outputs that running a task produces and where they are uploaded to."""

from __future__ import annotations

import enum
import hashlib
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

from baur.inputs import Digest
from baur.task import (
    DockerImageRegistryUpload,
    FileCopy,
    S3Upload,
    Task,
)

_CHUNK_SIZE = 1 << 16


class OutputType(enum.Enum):
    """The kind of an output."""

    DOCKER = "docker"
    FILE = "file"

    def __str__(self) -> str:
        return self.value


class DockerInfoClient(Protocol):
    """Queries information about docker images."""

    def size(self, image_id: str) -> int: ...

    def exists(self, image_id: str) -> bool: ...


@dataclass
class UploadInfoS3:
    """An S3 upload destination."""

    upload: S3Upload

    @property
    def bucket(self) -> str:
        return self.upload.bucket

    @property
    def key(self) -> str:
        return self.upload.key

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass
class UploadInfoDocker:
    """A docker registry upload destination."""

    upload: DockerImageRegistryUpload

    @property
    def registry(self) -> str:
        return self.upload.registry

    @property
    def repository(self) -> str:
        return self.upload.repository

    @property
    def tag(self) -> str:
        return self.upload.tag

    def __str__(self) -> str:
        if not self.registry:
            return f"{self.repository}/{self.tag}"
        return f"{self.registry}/{self.repository}/{self.tag}"


@dataclass
class UploadInfoFileCopy:
    """A file copy upload destination directory."""

    file_copy: FileCopy

    @property
    def path(self) -> str:
        return self.file_copy.path

    def __str__(self) -> str:
        return self.path


UploadInfo = Union[UploadInfoS3, UploadInfoDocker, UploadInfoFileCopy]


class OutputFile:
    """A file created by a task run."""

    type = OutputType.FILE

    def __init__(
        self,
        name: str,
        abs_path: str,
        s3_uploads: Sequence[UploadInfoS3] = (),
        filecopy_uploads: Sequence[UploadInfoFileCopy] = (),
    ) -> None:
        self.name = name
        self.abs_path = abs_path
        self.uploads_s3 = list(s3_uploads)
        self.uploads_filecopy = list(filecopy_uploads)
        self._digest: Optional[Digest] = None

    def __str__(self) -> str:
        return "file: " + self.name

    def __repr__(self) -> str:
        return f"OutputFile({self.name!r}, {self.abs_path!r})"

    def calc_digest(self) -> Digest:
        """Calculate the sha384 digest of the file content."""
        sha = hashlib.sha384()
        with open(self.abs_path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                sha.update(chunk)
        self._digest = Digest("sha384", sha.digest())
        return self._digest

    def digest(self) -> Digest:
        """Return the stored digest, calculating it on the first call."""
        if self._digest is not None:
            return self._digest
        return self.calc_digest()

    def exists(self) -> bool:
        """Return True if the file exists."""
        return os.path.isfile(self.abs_path)

    def size(self) -> int:
        """Return the size of the file in bytes."""
        return os.path.getsize(self.abs_path)


def _read_first_line(path: str) -> str:
    with open(path, encoding="utf-8") as fh:
        return fh.readline().rstrip("\r\n")


class OutputDockerImage:
    """A docker image produced by a task."""

    type = OutputType.DOCKER

    def __init__(
        self,
        docker_client: DockerInfoClient,
        name: str,
        image_id: str,
        upload_destinations: Optional[Sequence[UploadInfoDocker]],
        digest: Digest,
    ) -> None:
        self.name = name
        self.image_id = image_id
        self.upload_destinations = (
            list(upload_destinations) if upload_destinations is not None else None
        )
        self._docker_client = docker_client
        self._digest = digest

    @classmethod
    def from_iid_file(
        cls,
        docker_client: DockerInfoClient,
        name: str,
        iidfile: str,
        upload_destinations: Optional[Sequence[UploadInfoDocker]],
    ) -> "OutputDockerImage":
        """Create the output from a file holding the image ID on its first line."""
        try:
            image_id = _read_first_line(iidfile)
        except OSError as exc:
            raise OSError(exc.errno, f"reading {iidfile} failed: {exc}") from exc

        try:
            digest = Digest.from_string(image_id)
        except ValueError as exc:
            raise ValueError(
                f"image id {image_id!r} read from {iidfile!r} has an invalid format: {exc}"
            ) from exc

        return cls(docker_client, name, image_id, upload_destinations, digest)

    def __str__(self) -> str:
        return f"docker image: {self.image_id}"

    def __repr__(self) -> str:
        return f"OutputDockerImage({self.name!r}, {self.image_id!r})"

    def digest(self) -> Digest:
        """Return the image ID as a digest."""
        return self._digest

    def exists(self) -> bool:
        """Return True if the image exists."""
        return self._docker_client.exists(self.image_id)

    def size(self) -> int:
        """Return the image size in bytes, 0 if it can not be determined."""
        try:
            return int(self._docker_client.size(self.image_id))
        except Exception:
            return 0


Output = Union[OutputFile, OutputDockerImage]


def _docker_outputs(docker_client: DockerInfoClient, task: Task) -> list[Output]:
    return [
        OutputDockerImage.from_iid_file(
            docker_client,
            docker_output.id_file,
            os.path.join(task.directory, docker_output.id_file),
            [UploadInfoDocker(upload) for upload in docker_output.registry_upload],
        )
        for docker_output in task.outputs.docker_image
    ]


def _file_outputs(task: Task) -> list[Output]:
    result: list[Output] = []
    for file_output in task.outputs.file:
        if not file_output.s3_upload and not file_output.file_copy:
            raise ValueError(
                f"no upload method for output {file_output.path!r} is specified"
            )
        result.append(
            OutputFile(
                file_output.path,
                os.path.join(task.directory, file_output.path),
                [UploadInfoS3(upload) for upload in file_output.s3_upload],
                [UploadInfoFileCopy(copy) for copy in file_output.file_copy],
            )
        )
    return result


def outputs_from_task(docker_client: DockerInfoClient, task: Task) -> list[Output]:
    """Return the outputs that running task produces, docker images first.

    Docker image outputs are read from their image ID files, so the outputs
    must exist.
    """
    return [*_docker_outputs(docker_client, task), *_file_outputs(task)]
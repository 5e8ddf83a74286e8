"""Uploading task outputs to their destinations."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Protocol

from baur.outputs import (
    Output,
    OutputDockerImage,
    OutputFile,
    UploadInfo,
    UploadInfoDocker,
    UploadInfoFileCopy,
    UploadInfoS3,
)


class UploadMethod(enum.Enum):
    """How an output was uploaded."""

    S3 = "s3"
    FILECOPY = "filecopy"
    DOCKER = "docker"


class UploadError(Exception):
    """Uploading an output failed."""


class S3Uploader(Protocol):
    def upload(self, filepath: str, bucket: str, key: str) -> str: ...


class DockerImgUploader(Protocol):
    def upload(self, image: str, registry_addr: str, repository: str, tag: str) -> str: ...


class FileCopyUploader(Protocol):
    def upload(self, src: str, dst: str) -> str: ...


@dataclass
class UploadResult:
    """The outcome of one upload of an output."""

    output: Output
    url: str
    start: datetime
    stop: datetime
    method: UploadMethod


UploadStartFn = Callable[[Output, UploadInfo], None]
UploadResultFn = Callable[[Output, UploadResult], None]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Uploader:
    """Uploads outputs with the client matching each destination."""

    def __init__(
        self,
        docker_client: DockerImgUploader,
        s3_client: S3Uploader,
        filecopy_uploader: FileCopyUploader,
    ) -> None:
        self._docker_client = docker_client
        self._s3_client = s3_client
        self._filecopy_uploader = filecopy_uploader

    def upload(
        self,
        output: Output,
        upload_start_cb: UploadStartFn,
        result_cb: UploadResultFn,
    ) -> None:
        """Upload output to all its destinations.

        upload_start_cb is called before and result_cb after each upload.
        """
        if isinstance(output, OutputDockerImage):
            if output.upload_destinations is None:
                raise ValueError("uploadDestination is nil")
            for dest in output.upload_destinations:
                upload_start_cb(output, dest)
                try:
                    result = self.docker_image(output, dest)
                except Exception as exc:
                    raise UploadError(f"docker upload failed: {exc}") from exc
                result_cb(output, result)
            return

        if isinstance(output, OutputFile):
            for fc_dest in output.uploads_filecopy:
                upload_start_cb(output, fc_dest)
                try:
                    result = self.file_copy(output, fc_dest)
                except Exception as exc:
                    raise UploadError(f"filecopy failed: {exc}") from exc
                result_cb(output, result)

            for s3_dest in output.uploads_s3:
                upload_start_cb(output, s3_dest)
                try:
                    result = self.s3(output, s3_dest)
                except Exception as exc:
                    raise UploadError(f"s3 upload failed: {exc}") from exc
                result_cb(output, result)
            return

        raise TypeError(f"unsupported output type: {type(output).__name__}")

    def docker_image(self, output: OutputDockerImage, dest: UploadInfoDocker) -> UploadResult:
        """Upload a docker image to a registry."""
        start = _now()
        url = self._docker_client.upload(
            output.image_id, dest.registry, dest.repository, dest.tag
        )
        return UploadResult(output, url, start, _now(), UploadMethod.DOCKER)

    def file_copy(self, output: OutputFile, dest: UploadInfoFileCopy) -> UploadResult:
        """Copy a file output into the destination directory."""
        start = _now()
        dest_file = os.path.join(dest.path, os.path.basename(output.abs_path))
        url = self._filecopy_uploader.upload(output.abs_path, dest_file)
        return UploadResult(output, url, start, _now(), UploadMethod.FILECOPY)

    def s3(self, output: OutputFile, dest: UploadInfoS3) -> UploadResult:
        """Upload a file output to an S3 bucket."""
        start = _now()
        url = self._s3_client.upload(output.abs_path, dest.bucket, dest.key)
        return UploadResult(output, url, start, _now(), UploadMethod.S3)
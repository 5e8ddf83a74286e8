"""Uploading outputs by copying them to a directory."""

from __future__ import annotations

import os
import shutil
import stat
from typing import Callable, Optional


def _copy_file(src: str, dst: str) -> None:
    with open(src, "rb") as src_fh:
        mode = stat.S_IMODE(os.fstat(src_fh.fileno()).st_mode)
        flags = os.O_RDWR | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
        fd = os.open(dst, flags, mode)
        with os.fdopen(fd, "wb") as dst_fh:
            shutil.copyfileobj(src_fh, dst_fh)


class FileCopyClient:
    """Copies files from one path to another."""

    def __init__(self, debug_log_fn: Optional[Callable[[str], None]] = None) -> None:
        self._log = debug_log_fn if debug_log_fn is not None else (lambda _msg: None)

    def upload(self, src: str, dst: str) -> str:
        """Copy src to dst and return dst.

        A missing destination directory is created. If dst exists and is not a
        regular file FileExistsError is raised; an existing regular file is
        overwritten unless it is the same file as src.
        """
        dest_dir = os.path.dirname(dst) or os.curdir

        try:
            dir_stat = os.stat(dest_dir)
        except FileNotFoundError:
            os.makedirs(dest_dir, exist_ok=True)
            self._log(f"filecopy: created directory '{dest_dir}'")
        else:
            if not stat.S_ISDIR(dir_stat.st_mode):
                raise NotADirectoryError(f"{dest_dir} is not a directory")

        try:
            dst_stat = os.stat(dst)
        except FileNotFoundError:
            _copy_file(src, dst)
            return dst

        if not stat.S_ISREG(dst_stat.st_mode):
            raise FileExistsError(f"{dst} exist but is not a regular file")

        if os.path.samefile(src, dst):
            self._log(f"filecopy: '{dst}' already exist and is the same then '{src}'")
            return dst

        self._log(f"filecopy: '{dst}' already exist, overwriting file")
        _copy_file(src, dst)
        return dst
"""Access to git repositories via the git command."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import threading
from typing import Sequence

_LS_PATHSPEC_ERR_RE = re.compile(r"pathspec ('.+') did not match any file\(s\) known to git")

# Windows limits exec() arguments to 32767 characters; 2048 are left for the
# environment.
_MAX_ARGS_LEN = 32767 - 2048


class GitError(Exception):
    """A git command failed."""


def _run(directory: str | os.PathLike, *args: str) -> tuple[int, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=directory,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    return proc.returncode, proc.stdout.decode("utf-8", errors="replace")


def _run_checked(directory: str | os.PathLike, *args: str) -> str:
    code, output = _run(directory, *args)
    if code != 0:
        cmd = " ".join(("git", *args))
        raise GitError(
            f"executing {cmd!r} in {os.fspath(directory)!r} exited with code {code}, "
            f"expected 0, output:\n{output}"
        )
    return output


def command_is_installed() -> bool:
    """Return True if the git command is found in $PATH."""
    return shutil.which("git") is not None


def is_git_dir(directory: str | os.PathLike) -> bool:
    """Return True if the directory is the root of a git repository.

    A .git directory means True, a missing .git means False. Otherwise
    "git rev-parse --git-dir" decides: exit code 0 is True, 128 is False.
    """
    dot_git = os.path.join(directory, ".git")
    if os.path.isdir(dot_git):
        return True
    if not os.path.lexists(dot_git):
        return False

    code, _ = _run(directory, "rev-parse", "--git-dir")
    if code == 0:
        return True
    if code == 128:
        return False
    raise GitError(
        f"executing 'git rev-parse --git-dir' in {os.fspath(directory)!r} "
        f"exited with code {code}, expected 0 or 128"
    )


def commit_id(directory: str | os.PathLike) -> str:
    """Return the commit ID of HEAD of the repository in directory."""
    output = _run_checked(directory, "rev-parse", "HEAD").strip()
    if not output:
        raise GitError("executing git rev-parse HEAD failed, no Stdout output")
    return output


def split_args(args: Sequence[str], max_arg_str_len: int) -> tuple[list[str], list[str]]:
    """Split args after the element where the summed length exceeds the limit.

    Returns the leading part and the remaining elements; if the limit is never
    exceeded all args are returned and the remainder is empty.
    """
    total = 0
    for index, arg in enumerate(args):
        total += len(arg)
        if total > max_arg_str_len:
            return list(args[: index + 1]), list(args[index + 1 :])
    return list(args), []


def ls_files(
    directory: str | os.PathLike, *args: str, max_arg_length: int = _MAX_ARGS_LEN
) -> list[str]:
    """Run git ls-files with the pathspecs in args and return the paths.

    Pathspecs are taken literally, globs are not resolved. Long argument lists
    are split into several git invocations.
    """
    result: list[str] = []
    remaining = list(args)
    while remaining:
        chunk, remaining = split_args(remaining, max_arg_length)
        result.extend(_ls_files(directory, chunk))
    return result


def _ls_files(directory: str | os.PathLike, pathspec: list[str]) -> list[str]:
    git_args = ("--noglob-pathspecs", "-c", "core.quotepath=off", "ls-files", *pathspec)
    code, output = _run(directory, *git_args)

    if code != 0:
        unmatched = [
            spec
            for line in output.splitlines()
            if (match := _LS_PATHSPEC_ERR_RE.search(line))
            for spec in match.groups()
        ]
        if unmatched:
            raise GitError(
                "the following paths did not match any files: " + ", ".join(unmatched)
            )
        raise GitError(
            f"executing 'git ls-files' in {os.fspath(directory)!r} exited with code "
            f"{code}, expected 0, output:\n{output}"
        )

    output = output.rstrip("\n")
    if not output:
        return []
    return output.split("\n")


def worktree_is_dirty(directory: str | os.PathLike) -> bool:
    """Return True if the worktree has modified or untracked files."""
    return bool(_run_checked(directory, "status", "-s"))


class RepositoryState:
    """Lazily loads and caches the commit ID and worktree state of a repository."""

    def __init__(self, repository_path: str | os.PathLike) -> None:
        self.path = repository_path
        self._lock = threading.Lock()
        self._commit_id: str | None = None
        self._worktree_is_dirty: bool | None = None

    def commit_id(self) -> str:
        """Return the commit ID of HEAD, cached after the first success."""
        with self._lock:
            if self._commit_id is None:
                self._commit_id = commit_id(self.path)
            return self._commit_id

    def worktree_is_dirty(self) -> bool:
        """Return whether the worktree is dirty, cached after the first success."""
        with self._lock:
            if self._worktree_is_dirty is None:
                self._worktree_is_dirty = worktree_is_dirty(self.path)
            return self._worktree_is_dirty
"""Detection of the version control system a directory belongs to."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from baur import git


class VCSRepositoryNotExistError(Exception):
    """The directory is not part of a supported VCS repository."""

    def __init__(self, message: str = "vcs repository not found") -> None:
        super().__init__(message)


class StateFetcher(Protocol):
    """Retrieves information about a VCS repository."""

    def commit_id(self) -> str: ...

    def worktree_is_dirty(self) -> bool: ...


@dataclass(frozen=True)
class NoVCSState:
    """State of a directory that is not in a repository; every query raises."""

    directory: Optional[str] = None

    def commit_id(self) -> str:
        prefix = f"{self.directory}: " if self.directory else ""
        raise VCSRepositoryNotExistError(f"{prefix}vcs repository not found")

    def worktree_is_dirty(self) -> bool:
        prefix = f"{self.directory}: " if self.directory else ""
        raise VCSRepositoryNotExistError(f"{prefix}vcs repository not found")


LogFn = Callable[[str], None]


class _StateCache:
    def __init__(self) -> None:
        self.path: Optional[str] = None
        self.current: Optional[StateFetcher] = None
        self.lock = threading.Lock()


_cache = _StateCache()


def get_state(directory: str | os.PathLike, logfunc: Optional[LogFn] = None) -> StateFetcher:
    """Return the VCS state for directory.

    A git.RepositoryState is returned if directory is a git repository and the
    git command is installed, otherwise a NoVCSState. The result for the last
    queried directory is cached.
    """
    log = logfunc if logfunc is not None else (lambda _msg: None)

    with _cache.lock:
        path = os.path.abspath(directory)

        if _cache.current is not None and _cache.path == path:
            return _cache.current

        state: StateFetcher
        if not git.command_is_installed():
            log("vcs: git support disabled, git command is not installed or not in $PATH")
            state = NoVCSState(path)
        elif git.is_git_dir(path):
            log(f"vcs: {path} is part of a git repository found")
            state = git.RepositoryState(path)
        else:
            log(f"vcs: git support disabled, {path} is not part of a git repository")
            state = NoVCSState(path)

        _cache.path = path
        _cache.current = state
        return state
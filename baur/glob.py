"""Resolving glob patterns to files, with '**' matching directories recursively."""

from __future__ import annotations

import errno
import fnmatch
import os
from typing import Iterable, Iterator

_MAGIC_CHARS = "*?["


def _has_magic(text: str) -> bool:
    return any(char in text for char in _MAGIC_CHARS)


def _translate(component: str) -> str:
    # '[^...]' negates a character class like '[!...]' does.
    return component.replace("[^", "[!")


def _match_dir(directory: str, pattern: str) -> list[str]:
    try:
        names = sorted(os.listdir(directory or os.curdir))
    except OSError:
        return []
    translated = _translate(pattern)
    return [
        os.path.join(directory, name)
        for name in names
        if fnmatch.fnmatchcase(name, translated)
    ]


def _glob(pattern: str) -> list[str]:
    """Match pattern against the filesystem; '*' never crosses a separator."""
    if not _has_magic(pattern):
        return [pattern] if os.path.lexists(pattern) else []

    directory, base = os.path.split(pattern)
    dirs = _glob(directory) if _has_magic(directory) else [directory]

    result: list[str] = []
    for current in dirs:
        result.extend(_match_dir(current, base))
    return result


def _walk_dirs(base: str) -> Iterator[str]:
    """Yield base and every directory below it, in sorted pre-order.

    Symbolic links to directories are not followed; errors propagate.
    """
    with os.scandir(base) as entries:
        subdirs = sorted(
            entry.path for entry in entries if entry.is_dir(follow_symlinks=False)
        )
    yield base
    for sub in subdirs:
        yield from _walk_dirs(sub)


def _base_dirs(pattern: str, head: str) -> list[str]:
    base = head.rstrip(os.sep)
    if not head:
        base = os.curdir
    elif not base:
        base = os.sep

    if _has_magic(base):
        return [path for path in _glob(base) if os.path.isdir(path)]

    if not os.path.exists(base):
        raise FileNotFoundError(
            errno.ENOENT, f"resolving {pattern!r} failed: directory does not exist", base
        )
    if not os.path.isdir(base):
        raise NotADirectoryError(
            errno.ENOTDIR, f"resolving {pattern!r} failed: not a directory", base
        )
    return [base]


def _expand_recursive(pattern: str) -> Iterator[str]:
    """Replace the first '**' by one pattern per directory below its base."""
    head, _, tail = pattern.partition("**")

    if tail.startswith(os.sep):
        rest = tail[len(os.sep):] or "*"
    else:
        rest = "*" + tail

    for base in _base_dirs(pattern, head):
        for dirpath in _walk_dirs(base):
            yield os.path.normpath(os.path.join(dirpath, rest))


def _dedup(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(paths))


def file_glob(pattern: str) -> list[str]:
    """Return the paths of the files that match pattern.

    Works like a shell glob where '*' does not match path separators, with the
    addition that '**' matches any number of directories. Directories are never
    returned. A pattern without matches yields an empty list; a '**' pattern
    whose base directory does not exist raises FileNotFoundError.
    """
    if "**" in pattern:
        return _dedup(
            path for expanded in _expand_recursive(pattern) for path in file_glob(expanded)
        )

    return [path for path in _glob(pattern) if os.path.isfile(path)]


class GlobResolver:
    """Resolves glob paths to files, supporting '**' for recursive matches."""

    def resolve(self, glob_path: str) -> list[str]:
        """Return the file paths matching glob_path, an empty list if none."""
        return file_glob(glob_path)
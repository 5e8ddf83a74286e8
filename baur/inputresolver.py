"""Resolving the input definitions of tasks to concrete files."""

from __future__ import annotations

import logging
import os
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from baur.gitpath import GitPathResolver
from baur.glob import GlobResolver
from baur.inputs import InputFile
from baur.task import FileInputs, Task

_log = logging.getLogger(__name__)

_CACHE_MAX_ENTRIES = 512

_CacheKey = tuple[str, tuple[str, ...], bool, bool]


@dataclass
class CacheStatistics:
    """Counters of the resolver cache."""

    entries: int
    hits: int
    miss: int

    def hit_ratio(self) -> float:
        """Return the percentage of lookups that were hits, 0 if there were none."""
        if self.hits == 0 and self.miss == 0:
            return 0.0
        return self.hits / (self.hits + self.miss) * 100


class _LRUCache:
    def __init__(self, max_entries: int) -> None:
        self._max_entries = max_entries
        self._entries: OrderedDict[_CacheKey, list[str]] = OrderedDict()
        self._hits = 0
        self._miss = 0
        self._lock = threading.Lock()

    def get(self, key: _CacheKey) -> Optional[list[str]]:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._miss += 1
                return None
            self._hits += 1
            self._entries.move_to_end(key)
            return list(value)

    def set(self, key: _CacheKey, value: list[str]) -> None:
        with self._lock:
            self._entries[key] = list(value)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def statistics(self) -> CacheStatistics:
        with self._lock:
            return CacheStatistics(len(self._entries), self._hits, self._miss)


def _file_inputs_key(app_dir: str, file_inputs: FileInputs) -> _CacheKey:
    return (
        app_dir,
        tuple(file_inputs.paths),
        file_inputs.optional,
        file_inputs.git_tracked_only,
    )


class InputResolver:
    """Resolves task inputs to files and caches the results."""

    def __init__(self) -> None:
        self._git_resolver = GitPathResolver()
        self._glob_resolver = GlobResolver()
        self._cache = _LRUCache(_CACHE_MAX_ENTRIES)

    def resolve(self, repository_dir: str, task: Task) -> list[InputFile]:
        """Resolve the input definitions of task to deduplicated input files.

        Raises ValueError if a non-optional definition matches no file.
        """
        paths = self._resolve_file_inputs(task.directory, task.unresolved_inputs.files)
        paths.extend(task.cfg_filepaths)

        inputs = self._paths_to_uniq_inputs(repository_dir, paths)

        stats = self._cache.statistics()
        _log.debug(
            "inputresolver: cache statistic: %d entries, %d hits, %d miss, ratio %.2f%%",
            stats.entries,
            stats.hits,
            stats.miss,
            stats.hit_ratio(),
        )
        return inputs

    def cache_statistics(self) -> CacheStatistics:
        """Return the current cache counters."""
        return self._cache.statistics()

    def _resolve_file_inputs(self, app_dir: str, inputs: list[FileInputs]) -> list[str]:
        result: list[str] = []

        for file_inputs in inputs:
            key = _file_inputs_key(app_dir, file_inputs)
            cached = self._cache.get(key)
            if cached is not None:
                result.extend(cached)
                continue

            files: list[str] = []
            for path in file_inputs.paths:
                if not os.path.isabs(path):
                    path = os.path.join(app_dir, path)

                try:
                    if file_inputs.git_tracked_only:
                        resolved = self._git_resolver.resolve(app_dir, path)
                    else:
                        resolved = self._glob_resolver.resolve(path)
                except FileNotFoundError:
                    if file_inputs.optional:
                        continue
                    raise

                if not file_inputs.optional and not resolved:
                    raise ValueError(
                        f"resolving file inputs failed: '{path}' matched 0 files"
                    )

                files.extend(resolved)

            self._cache.set(key, files)
            result.extend(files)

        return result

    @staticmethod
    def _paths_to_uniq_inputs(repository_root: str, paths: list[str]) -> list[InputFile]:
        result: list[InputFile] = []
        seen: set[str] = set()

        for path in paths:
            if path in seen:
                _log.debug("removed duplicate input %r", path)
                continue
            seen.add(path)
            rel_path = os.path.relpath(path, repository_root)
            result.append(InputFile(repository_root, rel_path))

        return result
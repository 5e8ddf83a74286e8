"""Resolving glob paths to files tracked in a git repository."""

from __future__ import annotations

import os

from baur import git
from baur.glob import file_glob


class GitPathResolver:
    """Resolves glob paths to existing files that are tracked by git."""

    def resolve(self, working_dir: str, glob: str) -> list[str]:
        """Return absolute paths of tracked files matching the absolute glob.

        Globs are matched the same way as by GlobResolver; the matches are then
        filtered through git ls-files run in working_dir.
        """
        if not os.path.isabs(glob):
            raise ValueError(f"{glob} is not an absolute glob path")

        paths = file_glob(glob)
        if not paths:
            return []

        try:
            rel_paths = git.ls_files(working_dir, *paths)
        except git.GitError as exc:
            raise git.GitError(f"git ls-files failed: {exc}") from exc

        return [os.path.normpath(os.path.join(working_dir, rel)) for rel in rel_paths]
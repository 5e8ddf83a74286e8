"""Semantic version parsing and formatting."""

from __future__ import annotations

import re
from dataclasses import dataclass

_FORMAT_ERROR = "invalid format, should be <Major>[.<Minor>[.<Patch>[-appendix]]]"
_INT_RE = re.compile(r"[+-]?\d+")
_SPACE = " \t\r\n"


@dataclass
class SemVer:
    """A semantic version with an optional appendix and git commit."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    appendix: str = ""
    git_commit: str = ""

    def short(self) -> str:
        """Return the version without the git commit."""
        ver = f"{self.major}.{self.minor}.{self.patch}"
        if self.appendix:
            ver += "-" + self.appendix
        return ver

    def __str__(self) -> str:
        ver = self.short()
        if self.git_commit:
            ver += f" ({self.git_commit})"
        return ver


class _EndOfInput(Exception):
    pass


class _Mismatch(Exception):
    pass


class _Scanner:
    """Reads '<int>.<int>.<int>-<word>' piece by piece, like a formatted scan."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _skip_space(self) -> None:
        while not self._at_end() and self._text[self._pos] in _SPACE:
            self._pos += 1

    def integer(self) -> int:
        self._skip_space()
        if self._at_end():
            raise _EndOfInput
        match = _INT_RE.match(self._text, self._pos)
        if match is None:
            raise _Mismatch(f"expected integer at position {self._pos}")
        self._pos = match.end()
        return int(match.group())

    def literal(self, char: str) -> None:
        if self._at_end():
            raise _EndOfInput
        if self._text[self._pos] != char:
            raise _Mismatch(f"input does not match format at position {self._pos}")
        self._pos += 1

    def word(self) -> str:
        self._skip_space()
        if self._at_end():
            raise _EndOfInput
        start = self._pos
        while not self._at_end() and self._text[self._pos] not in _SPACE:
            self._pos += 1
        return self._text[start:self._pos]


def from_string(ver: str) -> SemVer:
    """Parse ``<Major>[.<Minor>[.<Patch>[-appendix]]]`` into a SemVer."""
    scanner = _Scanner(ver)
    numbers = [0, 0, 0]
    appendix = ""
    matched = 0

    try:
        for index in range(3):
            if index:
                scanner.literal(".")
            numbers[index] = scanner.integer()
            matched += 1
        scanner.literal("-")
        appendix = scanner.word()
    except _EndOfInput:
        pass
    except _Mismatch as exc:
        raise ValueError(f"{_FORMAT_ERROR}: {exc}") from None

    if matched < 1:
        raise ValueError(f"{_FORMAT_ERROR}: unexpected end of input")

    major, minor, patch = numbers
    return SemVer(major=major, minor=minor, patch=patch, appendix=appendix)


def load_package_vars(version: str, git_commit: str = "") -> SemVer:
    """Parse the build version string and attach the git commit to it."""
    try:
        semver = from_string(version)
    except ValueError as exc:
        raise ValueError(f"parsing version {version!r} failed: {exc}") from exc
    semver.git_commit = git_commit
    return semver
"""Task inputs, their digests and the differences between input sets."""

from __future__ import annotations

import enum
import hashlib
import os
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence

_DIGEST_SIZES = {"sha256": 32, "sha384": 48}
_CHUNK_SIZE = 1 << 16


@dataclass(frozen=True)
class Digest:
    """A hash value together with the name of its algorithm."""

    algorithm: str
    value: bytes

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.value.hex()}"

    @classmethod
    def from_string(cls, value: str) -> "Digest":
        """Parse a digest in the form '<algorithm>:<hex>'."""
        algorithm, sep, hex_value = value.partition(":")
        if not sep:
            raise ValueError(f"{value!r} has no '<algorithm>:' prefix")

        size = _DIGEST_SIZES.get(algorithm)
        if size is None:
            raise ValueError(f"unsupported digest algorithm {algorithm!r}")

        try:
            raw = bytes.fromhex(hex_value)
        except ValueError as exc:
            raise ValueError(f"{hex_value!r} is not a hex string: {exc}") from exc

        if len(raw) != size:
            raise ValueError(
                f"{algorithm} digest must be {size} bytes long, got {len(raw)}"
            )
        return cls(algorithm, raw)

    @classmethod
    def sum(cls, digests: Iterable["Digest"]) -> "Digest":
        """Return the sha384 digest over the given digests, in their order."""
        sha = hashlib.sha384()
        for digest in digests:
            sha.update(str(digest).encode())
        return cls("sha384", sha.digest())


class Input(Protocol):
    """Something whose digest is part of a task's input digest."""

    def digest(self) -> Digest: ...

    def __str__(self) -> str: ...


class InputFile:
    """A file input, identified by its repository relative path."""

    def __init__(self, repo_root_path: str, rel_path: str) -> None:
        self.abs_path = os.path.join(repo_root_path, rel_path)
        self.rel_path = rel_path
        self._digest: Optional[Digest] = None

    def __str__(self) -> str:
        return self.rel_path

    def __repr__(self) -> str:
        return f"InputFile({self.rel_path!r})"

    def calc_digest(self) -> Digest:
        """Calculate the sha384 of the relative path and the file content."""
        sha = hashlib.sha384()
        sha.update(self.rel_path.encode())
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


class InputString:
    """A string input."""

    def __init__(self, value: str) -> None:
        self.value = value
        self._digest: Optional[Digest] = None

    def __str__(self) -> str:
        return f"string:{self.value}"

    def __repr__(self) -> str:
        return f"InputString({self.value!r})"

    def digest(self) -> Digest:
        """Return the sha384 digest of the value."""
        if self._digest is None:
            self._digest = Digest("sha384", hashlib.sha384(self.value.encode()).digest())
        return self._digest


class Inputs:
    """The resolved inputs of a task."""

    def __init__(self, inputs: Sequence[Input]) -> None:
        self.inputs = list(inputs)
        self._digest: Optional[Digest] = None

    def digest(self) -> Digest:
        """Return the summarized digest over all inputs, cached after the first call."""
        if self._digest is None:
            self._digest = Digest.sum(inp.digest() for inp in self.inputs)
        return self._digest


def input_add_str_if_not_empty(inputs: Sequence[Input], value: str) -> list[Input]:
    """Return inputs plus an InputString of value, unless value is empty."""
    if not value:
        return list(inputs)
    return [*inputs, InputString(value)]


class DiffType(enum.Enum):
    """How an input differs between two input sets."""

    DIGEST_MISMATCH = "D"
    REMOVED = "-"
    ADDED = "+"

    def __str__(self) -> str:
        return self.value


@dataclass
class InputDiff:
    """A difference of one input between two input sets."""

    state: DiffType
    path: str
    digest1: str = ""
    digest2: str = ""


def _inputs_to_str_map(inputs: Iterable[Input]) -> dict[str, str]:
    return {str(inp): str(inp.digest()) for inp in inputs}


def diff_inputs(a: Inputs, b: Inputs) -> list[InputDiff]:
    """Return the differences between two input sets, sorted by path.

    Inputs are identified by their string representation.
    """
    a_map = _inputs_to_str_map(a.inputs)
    b_map = _inputs_to_str_map(b.inputs)

    diffs: list[InputDiff] = []
    for path, a_digest in a_map.items():
        b_digest = b_map.get(path)
        if b_digest is None:
            diffs.append(InputDiff(DiffType.REMOVED, path, digest1=a_digest))
        elif a_digest != b_digest:
            diffs.append(InputDiff(DiffType.DIGEST_MISMATCH, path, a_digest, b_digest))

    diffs.extend(
        InputDiff(DiffType.ADDED, path, digest2=b_digest)
        for path, b_digest in b_map.items()
        if path not in a_map
    )

    diffs.sort(key=lambda diff: diff.path)
    return diffs
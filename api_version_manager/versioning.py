"""
Version tokens: parsing and ordering of deployed API versions.

Two parse modes:
- parse_version: strict, for user-supplied candidates ("v3-2-0").
  Failures raise InvalidFormat.
- parse_tag: lenient, for tags already attached to deployed stages
  ("v3-2-0", "3.2.0", "v3-2"). Failures raise UnparseableTag so cleanup can
  skip the record instead of aborting.

Comparison is component-wise from the left; missing trailing components
count as zero, so v1-0 == v1-0-0.
"""
from __future__ import annotations

import enum
import functools
import re
from dataclasses import dataclass
from itertools import zip_longest
from typing import Iterable, List, Optional, Protocol, Tuple, TypeVar, Union

from .core.errors import InvalidFormat, UnparseableTag

VERSION_MARKER = "v"
DEFAULT_SEPARATORS = "-."

# Full shape a candidate version must have before it may be deployed.
CANDIDATE_PATTERN = re.compile(r"v[0-9]+-[0-9]+-[0-9]+")
_STRICT_PATTERN = re.compile(r"v[0-9]+(?:-[0-9]+)*")


class Ordering(enum.Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class VersionToken:
    """Immutable ordered tuple of non-negative integers."""

    components: Tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.components:
            raise ValueError("VersionToken needs at least one component")
        if any(c < 0 for c in self.components):
            raise ValueError(f"Version components must be non-negative: {self.components}")

    @property
    def major(self) -> int:
        return self.components[0]

    @property
    def minor(self) -> int:
        return self.components[1] if len(self.components) > 1 else 0

    @property
    def patch(self) -> int:
        return self.components[2] if len(self.components) > 2 else 0

    def bump_patch(self) -> "VersionToken":
        return VersionToken((self.major, self.minor, self.patch + 1))

    def render(self, separator: str = "-") -> str:
        """Render as a marker-prefixed tag, e.g. 'v1-2-3'."""
        return VERSION_MARKER + separator.join(str(c) for c in self.components)

    def __str__(self) -> str:
        return self.render()

    # Padded comparison; equality here is ordering equality (v1-0 == v1-0-0).
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return compare(self, other) is Ordering.EQUAL

    def __hash__(self) -> int:
        trimmed = list(self.components)
        while len(trimmed) > 1 and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __lt__(self, other: "VersionToken") -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return compare(self, other) is Ordering.LESS

    def __le__(self, other: "VersionToken") -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return compare(self, other) is not Ordering.GREATER

    def __gt__(self, other: "VersionToken") -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return compare(self, other) is Ordering.GREATER

    def __ge__(self, other: "VersionToken") -> bool:
        if not isinstance(other, VersionToken):
            return NotImplemented
        return compare(self, other) is not Ordering.LESS


VersionLike = Union[VersionToken, str]


def parse_version(raw: object) -> VersionToken:
    """
    Strict parse of a user-supplied version: 'v<int>(-<int>)*'.

    Raises InvalidFormat when the string has another shape or lacks the
    leading 'v'.
    """
    if not isinstance(raw, str) or not _STRICT_PATTERN.fullmatch(raw):
        raise InvalidFormat(raw, expected="v<int>(-<int>)*")
    return VersionToken(tuple(int(part) for part in raw[1:].split("-")))


def parse_tag(raw: object, separators: str = DEFAULT_SEPARATORS) -> VersionToken:
    """
    Lenient parse of a historical tag: optional leading 'v', components
    split on any character of `separators`.

    Raises UnparseableTag for anything that is not all non-negative integers.
    """
    if not isinstance(raw, str) or not separators:
        raise UnparseableTag(raw)
    text = raw.strip()
    if text.startswith(VERSION_MARKER):
        text = text[len(VERSION_MARKER):]
    parts = re.split("[" + re.escape(separators) + "]", text)
    if not parts or not all(p.isdigit() and p.isascii() for p in parts):
        raise UnparseableTag(raw)
    return VersionToken(tuple(int(p) for p in parts))


def _coerce(value: VersionLike) -> VersionToken:
    if isinstance(value, VersionToken):
        return value
    return parse_tag(value)


def compare(a: VersionLike, b: VersionLike) -> Ordering:
    """Component-wise integer comparison, missing trailing components as zero."""
    left, right = _coerce(a), _coerce(b)
    for x, y in zip_longest(left.components, right.components, fillvalue=0):
        if x > y:
            return Ordering.GREATER
        if x < y:
            return Ordering.LESS
    return Ordering.EQUAL


def is_greater(a: VersionLike, b: VersionLike) -> bool:
    return compare(a, b) is Ordering.GREATER


class _HasToken(Protocol):
    @property
    def version_token(self) -> Optional[VersionToken]: ...


R = TypeVar("R", bound=_HasToken)


def _record_order(a: _HasToken, b: _HasToken) -> int:
    # Records without a readable token sort first, as the oldest.
    ta, tb = a.version_token, b.version_token
    if ta is None or tb is None:
        return (ta is not None) - (tb is not None)
    return compare(ta, tb).value


def sort_versions(records: Iterable[R]) -> List[R]:
    """Stable ascending sort of deployed version records by their token."""
    return sorted(records, key=functools.cmp_to_key(_record_order))

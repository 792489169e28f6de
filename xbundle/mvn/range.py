"""Maven version range specifications and the version sets they describe."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from xbundle.mvn.package import Version

_DELIMITERS = {"[": (True, True), "(": (True, False), "]": (False, True), ")": (False, False)}


class TokenKind(enum.Enum):
    OPEN = "open"
    COMMA = "comma"
    CLOSE = "close"
    VERSION = "version"


@dataclass(frozen=True)
class Token:
    """A lexical token; ``value`` is the inclusiveness of a bracket or the version text."""

    kind: TokenKind
    value: bool | str | None = None


_COMMA = Token(TokenKind.COMMA)


def tokenize(text: str) -> Iterator[Token]:
    """Split a range specification into brackets, commas and version strings."""
    buffer: list[str] = []
    for char in text:
        if char == ",":
            token = _COMMA
        elif char in _DELIMITERS:
            is_open, inclusive = _DELIMITERS[char]
            token = Token(TokenKind.OPEN if is_open else TokenKind.CLOSE, inclusive)
        else:
            buffer.append(char)
            continue
        if buffer:
            yield Token(TokenKind.VERSION, "".join(buffer))
            buffer.clear()
        yield token
    if buffer:
        yield Token(TokenKind.VERSION, "".join(buffer))


@dataclass(frozen=True)
class Bound:
    version: str
    inclusive: bool


class RangeKind(enum.Enum):
    EXACT = "exact"
    GREATER = "greater"
    LOWER = "lower"
    BETWEEN = "between"


@dataclass(frozen=True)
class Requirement:
    """One comma-separated part of a range specification.

    An exact requirement carries the same inclusive bound as lower and upper.
    """

    kind: RangeKind
    lower: Bound | None = None
    upper: Bound | None = None

    @classmethod
    def _exact(cls, version: str) -> Requirement:
        bound = Bound(version, True)
        return cls(RangeKind.EXACT, bound, bound)


def _parse_one(tokens: Iterator[Token]) -> Requirement | None:
    token = next(tokens, None)
    if token is None:
        return None
    if token.kind is TokenKind.VERSION:
        return Requirement(RangeKind.GREATER, lower=Bound(token.value, True))
    if token.kind is not TokenKind.OPEN:
        return None
    inclusive = token.value

    token = next(tokens, None)
    if token is None:
        return None
    if token.kind is TokenKind.VERSION:
        follow = next(tokens, None)
        if follow is None:
            return None
        if follow.kind is TokenKind.COMMA:
            lower = Bound(token.value, inclusive)
        elif follow.kind is TokenKind.CLOSE and follow.value and inclusive:
            return Requirement._exact(token.value)
        else:
            return None
    elif token.kind is TokenKind.COMMA:
        lower = None
    else:
        return None

    token = next(tokens, None)
    if token is None:
        return None
    if token.kind is TokenKind.CLOSE:
        upper = None
    elif token.kind is TokenKind.VERSION:
        follow = next(tokens, None)
        if follow is None or follow.kind is not TokenKind.CLOSE:
            return None
        upper = Bound(token.value, follow.value)
    else:
        return None

    if lower is None and upper is not None:
        return Requirement(RangeKind.LOWER, upper=upper)
    if lower is not None and upper is None:
        return Requirement(RangeKind.GREATER, lower=lower)
    if lower is not None and upper is not None:
        return Requirement(RangeKind.BETWEEN, lower=lower, upper=upper)
    return None


def parse(tokens: Iterable[Token]) -> Iterator[Requirement]:
    """Parse tokens into requirements; stops at the first malformed requirement.

    Raises ValueError if two requirements are not separated by a comma.
    """
    stream = iter(tokens)
    first = True
    while True:
        if not first:
            separator = next(stream, None)
            if separator is None:
                return
            if separator != _COMMA:
                raise ValueError(f"expected a comma between ranges, got {separator}")
        first = False
        requirement = _parse_one(stream)
        if requirement is None:
            return
        yield requirement


_Segment = tuple[Version, "Version | None"]


def _normalize(segments: Iterable[_Segment]) -> tuple[_Segment, ...]:
    merged: list[_Segment] = []
    for start, end in sorted(
        (s for s in segments if s[1] is None or s[0] < s[1]), key=lambda s: s[0]
    ):
        if merged:
            last_start, last_end = merged[-1]
            if last_end is None or start <= last_end:
                if last_end is not None and (end is None or end > last_end):
                    merged[-1] = (last_start, end)
                continue
        merged.append((start, end))
    return tuple(merged)


@dataclass(frozen=True)
class VersionRange:
    """A set of versions as disjoint half-open intervals ``[start, end)``.

    An end of None means the interval is unbounded above.
    """

    segments: tuple[_Segment, ...] = ()

    @classmethod
    def none(cls) -> VersionRange:
        return cls(())

    @classmethod
    def full(cls) -> VersionRange:
        return cls(((Version.lowest(), None),))

    @classmethod
    def exact(cls, version: Version) -> VersionRange:
        return cls(((version, version.bump()),))

    @classmethod
    def higher_than(cls, version: Version) -> VersionRange:
        """All versions greater than or equal to ``version``."""
        return cls(((version, None),))

    @classmethod
    def strictly_lower_than(cls, version: Version) -> VersionRange:
        lowest = Version.lowest()
        if version > lowest:
            return cls(((lowest, version),))
        return cls.none()

    @classmethod
    def between(cls, lower: Version, upper: Version) -> VersionRange:
        """Versions from ``lower`` inclusive up to ``upper`` exclusive."""
        if lower < upper:
            return cls(((lower, upper),))
        return cls.none()

    def union(self, other: VersionRange) -> VersionRange:
        return VersionRange(_normalize(self.segments + other.segments))

    def intersection(self, other: VersionRange) -> VersionRange:
        pieces = []
        for start_a, end_a in self.segments:
            for start_b, end_b in other.segments:
                start = max(start_a, start_b)
                if end_a is None:
                    end = end_b
                elif end_b is None:
                    end = end_a
                else:
                    end = min(end_a, end_b)
                pieces.append((start, end))
        return VersionRange(_normalize(pieces))

    def contains(self, version: Version) -> bool:
        return any(
            start <= version and (end is None or version < end) for start, end in self.segments
        )

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and self.contains(version)

    def lowest_version(self) -> Version | None:
        return self.segments[0][0] if self.segments else None

    def is_empty(self) -> bool:
        return not self.segments


def _to_range(requirement: Requirement) -> VersionRange:
    kind = requirement.kind
    if kind is RangeKind.EXACT:
        return VersionRange.exact(Version.parse(requirement.lower.version))
    if kind is RangeKind.LOWER:
        version = Version.parse(requirement.upper.version)
        if requirement.upper.inclusive:
            version = version.bump()
        return VersionRange.strictly_lower_than(version)
    if kind is RangeKind.GREATER:
        return VersionRange.higher_than(Version.parse(requirement.lower.version))
    lower = Version.parse(requirement.lower.version)
    upper = Version.parse(requirement.upper.version)
    if requirement.upper.inclusive:
        upper = upper.bump()
    return VersionRange.between(lower, upper)


def parse_range(text: str) -> VersionRange:
    """Turn a Maven range specification into the set of versions it allows."""
    result = VersionRange.none()
    for requirement in parse(tokenize(text)):
        result = result.union(_to_range(requirement))
    return result
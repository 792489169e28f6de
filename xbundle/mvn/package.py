"""Maven coordinates: packages, versions and artifacts."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

_NUMBER = re.compile(r"\+?[0-9]+")
_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class Package:
    """A group id and artifact id pair."""

    group: str
    name: str

    def file_name(self) -> str:
        return f"{self.group}-{self.name}.metadata.xml"

    def url(self, repo: str) -> str:
        return f"{repo}/{self.group.replace('.', '/')}/{self.name}/maven-metadata.xml"

    def __str__(self) -> str:
        return f"{self.group}:{self.name}"


def _parse_u32(text: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise ValueError(f"invalid version component {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise ValueError(f"version component {text!r} out of range")
    return value


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A major.minor.patch version with an optional pre-release suffix."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    suffix: str | None = None

    def _key(self) -> tuple:
        # A version without a suffix sorts after any suffixed one.
        return (
            self.major,
            self.minor,
            self.patch,
            self.suffix is None,
            self.suffix or "",
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``major[.minor[.patch]][-suffix]``; missing parts default to 0."""
        numbers, sep, suffix = text.partition("-")
        parts = numbers.split(".")[:3]
        values = [_parse_u32(part) for part in parts]
        values += [0] * (3 - len(values))
        return cls(*values, suffix=suffix if sep else None)

    @classmethod
    def lowest(cls) -> Version:
        return cls(0, 0, 0, None)

    def bump(self) -> Version:
        """Return the smallest release version greater than this one."""
        patch = self.patch if self.suffix is not None else self.patch + 1
        return Version(self.major, self.minor, patch, None)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        return f"{text}-{self.suffix}" if self.suffix is not None else text


@dataclass(frozen=True)
class Artifact:
    """A package at a specific version."""

    package: Package
    version: Version

    def file_name(self, ext: str) -> str:
        return f"{self.package.group}-{self.package.name}-{self.version}.{ext}"

    def url(self, repo: str, ext: str) -> str:
        group = self.package.group.replace(".", "/")
        name = self.package.name
        return f"{repo}/{group}/{name}/{self.version}/{name}-{self.version}.{ext}"

    def __str__(self) -> str:
        return f"{self.package.group}:{self.package.name}:{self.version}"
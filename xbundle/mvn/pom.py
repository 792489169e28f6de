"""Project object model documents: packaging and declared dependencies."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from xbundle.mvn.package import Package
from xbundle.mvn.range import VersionRange, parse_range


def _local(tag: str) -> str:
    return tag.rpartition("}")[2]


def _find(element: ET.Element, name: str) -> ET.Element | None:
    return next((child for child in element if _local(child.tag) == name), None)


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _required(element: ET.Element, name: str) -> str:
    child = _find(element, name)
    if child is None:
        raise ValueError(f"missing <{name}> in <{_local(element.tag)}>")
    return _text(child)


@dataclass(frozen=True)
class Dependency:
    """A dependency on a package within a version range specification."""

    group: str
    name: str
    version: str
    scope: str | None = None

    @classmethod
    def _from_element(cls, element: ET.Element) -> Dependency:
        scope = _find(element, "scope")
        return cls(
            group=_required(element, "groupId"),
            name=_required(element, "artifactId"),
            version=_required(element, "version"),
            scope=None if scope is None else _text(scope),
        )

    @classmethod
    def parse(cls, text: str) -> Dependency:
        """Parse ``group:name:version``."""
        group, sep, rest = text.partition(":")
        if not sep:
            raise ValueError("invalid dep")
        name, sep, version = rest.partition(":")
        if not sep:
            raise ValueError("invalid dep")
        return cls(group=group, name=name, version=version)

    def package(self) -> Package:
        return Package(self.group, self.name)

    def range(self) -> VersionRange:
        return parse_range(self.version)


@dataclass(frozen=True)
class Pom:
    """The parts of a ``pom.xml`` needed for dependency resolution."""

    declared_packaging: str | None = None
    dependencies: list[Dependency] = field(default_factory=list)

    @classmethod
    def from_xml(cls, text: str) -> Pom:
        """Parse a project document; namespaces on element names are ignored."""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as err:
            raise ValueError(f"invalid pom document: {err}") from err
        if _local(root.tag) != "project":
            raise ValueError(f"expected <project>, found <{_local(root.tag)}>")
        packaging = _find(root, "packaging")
        dependencies = _find(root, "dependencies")
        return cls(
            declared_packaging=None if packaging is None else _text(packaging),
            dependencies=[]
            if dependencies is None
            else [Dependency._from_element(child) for child in dependencies],
        )

    def packaging(self) -> str:
        """The declared packaging, ``jar`` when none is declared."""
        return self.declared_packaging if self.declared_packaging is not None else "jar"
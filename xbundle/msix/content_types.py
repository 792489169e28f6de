"""The ``[Content_Types].xml`` part of an app package."""

from __future__ import annotations

import mimetypes
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import PurePosixPath

NAMESPACE = "http://schemas.openxmlformats.org/package/2006/content-types"
_OCTET_STREAM = "application/octet-stream"
_MIME = mimetypes.MimeTypes()


@dataclass(frozen=True)
class DefaultRule:
    """Content type for every part with a given extension."""

    extension: str
    content_type: str


@dataclass(frozen=True)
class OverrideRule:
    """Content type for one specific part."""

    part_name: str
    content_type: str


def _default_rules() -> list[DefaultRule | OverrideRule]:
    return [
        OverrideRule("/AppxBlockMap.xml", "application/vnd.ms-appx.blockmap+xml"),
        OverrideRule("/AppxSignature.p7x", "application/vnd.ms-appx.signature"),
    ]


def _to_xml(element: ET.Element, standalone: bool) -> bytes:
    flag = "yes" if standalone else "no"
    declaration = f'<?xml version="1.0" encoding="UTF-8" standalone="{flag}"?>'
    return (declaration + ET.tostring(element, encoding="unicode")).encode("utf-8")


@dataclass
class ContentTypes:
    """The content type rules of a package."""

    rules: list[DefaultRule | OverrideRule] = field(default_factory=_default_rules)
    namespace: str = NAMESPACE

    def to_xml(self, standalone: bool = True) -> bytes:
        """Render the document, with an XML declaration, as UTF-8 bytes."""
        root = ET.Element("Types", {"xmlns": self.namespace})
        for rule in self.rules:
            if isinstance(rule, DefaultRule):
                ET.SubElement(
                    root,
                    "Default",
                    {"Extension": rule.extension, "ContentType": rule.content_type},
                )
            else:
                ET.SubElement(
                    root,
                    "Override",
                    {"PartName": rule.part_name, "ContentType": rule.content_type},
                )
        return _to_xml(root, standalone)


def _extension(path: str | os.PathLike[str]) -> str | None:
    name = PurePosixPath(os.fspath(path)).name
    if not name or name == "..":
        return None
    base, dot, ext = name.rpartition(".")
    if not dot or not base:
        return None
    return ext


def _guess_mime(ext: str) -> str:
    key = "." + ext.lower()
    return _MIME.types_map[True].get(key) or _MIME.types_map[False].get(key) or _OCTET_STREAM


class ContentTypesBuilder:
    """Collects one default rule per file extension seen."""

    def __init__(self) -> None:
        self._extensions: set[str] = set()
        self._content_types: ContentTypes | None = ContentTypes()

    def _current(self) -> ContentTypes:
        if self._content_types is None:
            raise RuntimeError("content types have already been finished")
        return self._content_types

    def add(self, path: str | os.PathLike[str]) -> None:
        """Register the extension of ``path`` if it has not been seen yet."""
        content_types = self._current()
        ext = _extension(path)
        if ext is None or ext in self._extensions:
            return
        content_types.rules.append(DefaultRule(ext, _guess_mime(ext)))
        self._extensions.add(ext)

    def finish(self) -> ContentTypes:
        """Return the collected rules; the builder cannot be used afterwards."""
        content_types = self._current()
        self._content_types = None
        return content_types
"""PRI resource index files: header, table of contents and sections."""

from __future__ import annotations

import io
import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, NamedTuple, Union

from xbundle.pri.data_item import DataItem
from xbundle.pri.decision_info import DecisionInfo
from xbundle.pri.hierarchical_schema import HierarchicalSchema
from xbundle.pri.pri_descriptor import PriDescriptor
from xbundle.pri.resource_map import ResourceMap

_HEADER = "<8sHHIIIHHI"
_HEADER_SIZE = struct.calcsize(_HEADER)
_TOC_ENTRY = "<16sHHIII"
_TOC_ENTRY_SIZE = struct.calcsize(_TOC_ENTRY)
_SECTION_HEADER = "<16sIHHII"
_SECTION_HEADER_SIZE = struct.calcsize(_SECTION_HEADER)
_SECTION_TRAILER = "<II"
_SECTION_OVERHEAD = _SECTION_HEADER_SIZE + struct.calcsize(_SECTION_TRAILER)
_FILE_TRAILER_SIZE = 16
_FILE_MAGIC = 0xDEFFFADE
_SECTION_MAGIC = 0xDEF5FADE


def _unpack(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return struct.unpack(fmt, data)


@dataclass
class UnknownSection:
    """A section whose identifier is not recognised; its body is kept verbatim."""

    identifier: bytes
    data: bytes = b""

    @classmethod
    def read(cls, identifier: bytes, length: int, stream: BinaryIO) -> UnknownSection:
        """Read ``length`` raw bytes of section body."""
        return cls(identifier=bytes(identifier), data=stream.read(length))

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.data)

    def __repr__(self) -> str:
        try:
            name = self.identifier.decode("utf-8")
        except UnicodeDecodeError:
            name = repr(self.identifier)
        return f"UnknownSection(identifier={name!r}, length={len(self.data)})"


SectionData = Union[
    DataItem, PriDescriptor, ResourceMap, DecisionInfo, HierarchicalSchema, UnknownSection
]

_KNOWN_SECTIONS = (DataItem, PriDescriptor, ResourceMap, DecisionInfo, HierarchicalSchema)
_READERS = {cls.IDENTIFIER: cls for cls in _KNOWN_SECTIONS}


def section_identifier(data: SectionData) -> bytes:
    """Return the 16-byte identifier of a section body."""
    if isinstance(data, UnknownSection):
        return data.identifier
    if isinstance(data, _KNOWN_SECTIONS):
        return type(data).IDENTIFIER
    raise TypeError(f"unsupported section data {type(data).__name__}")


def read_section_data(identifier: bytes, length: int, stream: BinaryIO) -> SectionData:
    """Parse a section body according to its identifier."""
    reader = _READERS.get(bytes(identifier))
    if reader is None:
        return UnknownSection.read(identifier, length, stream)
    return reader.read(stream)


class _TocEntry(NamedTuple):
    section_identifier: bytes
    flags: int
    section_flags: int
    section_qualifier: int
    section_offset: int
    section_length: int

    @classmethod
    def read(cls, stream: BinaryIO) -> _TocEntry:
        return cls(*_unpack(stream, _TOC_ENTRY))

    def to_bytes(self) -> bytes:
        return struct.pack(_TOC_ENTRY, *self)


@dataclass
class Section:
    """A section of a PRI file: its header fields and parsed body."""

    section_qualifier: int
    flags: int
    section_flags: int
    data: SectionData

    @classmethod
    def read(cls, stream: BinaryIO) -> Section:
        """Parse a section starting at the current stream position."""
        start = stream.tell()
        identifier, qualifier, flags, section_flags, length, reserved = _unpack(
            stream, _SECTION_HEADER
        )
        if reserved != 0:
            raise ValueError("reserved section header field must be zero")
        if length < _SECTION_OVERHEAD:
            raise ValueError(f"section length {length} is too small")
        data = read_section_data(identifier, length - _SECTION_OVERHEAD, stream)
        stream.seek(start + length - 8, io.SEEK_SET)
        magic, trailing_length = _unpack(stream, _SECTION_TRAILER)
        if magic != _SECTION_MAGIC:
            raise ValueError("missing section trailer")
        if trailing_length != length:
            raise ValueError("section trailer length does not match header")
        return cls(
            section_qualifier=qualifier,
            flags=flags,
            section_flags=section_flags,
            data=data,
        )

    def write(self, stream: BinaryIO) -> None:
        """Serialize the section to a seekable binary stream."""
        stream.write(
            struct.pack(
                _SECTION_HEADER,
                section_identifier(self.data),
                self.section_qualifier,
                self.flags,
                self.section_flags,
                0,
                0,
            )
        )
        start = stream.tell()
        self.data.write(stream)
        end = stream.tell()
        length = end - start + _SECTION_OVERHEAD
        stream.write(struct.pack(_SECTION_TRAILER, _SECTION_MAGIC, length))
        stream.seek(start - 8, io.SEEK_SET)
        stream.write(struct.pack("<I", length))
        stream.seek(end + 8, io.SEEK_SET)


@dataclass
class PriFile:
    """A package resource index: an ordered list of sections."""

    MRM_PRI0: ClassVar[str] = "mrm_pri0"
    MRM_PRI1: ClassVar[str] = "mrm_pri1"
    MRM_PRI2: ClassVar[str] = "mrm_pri2"
    MRM_PRIF: ClassVar[str] = "mrm_prif"

    sections: list[Section] = field(default_factory=list)

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> PriFile:
        with open(path, "rb") as stream:
            return cls.read(stream)

    @classmethod
    def read(cls, stream: BinaryIO) -> PriFile:
        """Parse a PRI file from a seekable binary stream."""
        base = stream.tell()
        (magic,) = _unpack(stream, "<8s")
        versions = {v.encode() for v in (cls.MRM_PRI0, cls.MRM_PRI1, cls.MRM_PRI2, cls.MRM_PRIF)}
        if magic not in versions:
            raise ValueError("Data does not start with a PRI file header.")
        (
            zero,
            one,
            total_size,
            toc_offset,
            section_start,
            num_sections,
            marker,
            reserved,
        ) = _unpack(stream, _HEADER[0] + _HEADER[3:])
        if zero != 0 or one != 1:
            raise ValueError("unexpected PRI header fields")
        if marker != 0xFFFF:
            raise ValueError("unexpected PRI header marker")
        if reserved != 0:
            raise ValueError("expected 0")
        if total_size < _HEADER_SIZE + _FILE_TRAILER_SIZE:
            raise ValueError(f"total file size {total_size} is too small")
        stream.seek(base + total_size - _FILE_TRAILER_SIZE, io.SEEK_SET)
        trailer_magic, trailer_size, trailer_version = _unpack(stream, "<II8s")
        if trailer_magic != _FILE_MAGIC:
            raise ValueError("missing PRI file trailer")
        if trailer_size != total_size:
            raise ValueError("PRI trailer size does not match header")
        if trailer_version != magic:
            raise ValueError("PRI trailer version does not match header")
        stream.seek(base + toc_offset, io.SEEK_SET)
        toc = [_TocEntry.read(stream) for _ in range(num_sections)]
        sections = []
        for entry in toc:
            stream.seek(base + section_start + entry.section_offset, io.SEEK_SET)
            sections.append(Section.read(stream))
        return cls(sections=sections)

    def create(self, path: str | os.PathLike[str]) -> None:
        with open(path, "wb") as stream:
            self.write(stream)

    def write(self, stream: BinaryIO) -> None:
        """Serialize the file in ``mrm_pri2`` format to a seekable binary stream."""
        base = stream.tell()
        magic = self.MRM_PRI2.encode()
        toc_offset = _HEADER_SIZE
        section_start = toc_offset + _TOC_ENTRY_SIZE * len(self.sections)
        stream.write(
            struct.pack(
                _HEADER,
                magic,
                0,
                1,
                0,
                toc_offset,
                section_start,
                len(self.sections) & 0xFFFF,
                0xFFFF,
                0,
            )
        )
        for section in self.sections:
            stream.write(
                _TocEntry(
                    section_identifier(section.data),
                    section.flags,
                    section.section_flags,
                    section.section_qualifier,
                    0,
                    0,
                ).to_bytes()
            )
        for i, section in enumerate(self.sections):
            start = stream.tell()
            section.write(stream)
            end = stream.tell()
            stream.seek(base + toc_offset + _TOC_ENTRY_SIZE * i + 24, io.SEEK_SET)
            stream.write(struct.pack("<II", start - base - section_start, end - start))
            stream.seek(end, io.SEEK_SET)
        total_size = stream.tell() - base + _FILE_TRAILER_SIZE
        stream.write(struct.pack("<II8s", _FILE_MAGIC, total_size, magic))
        end = stream.tell()
        stream.seek(base + 12, io.SEEK_SET)
        stream.write(struct.pack("<I", total_size))
        stream.seek(end, io.SEEK_SET)

    def add_section(self, section: Section) -> None:
        self.sections.append(section)

    def num_sections(self) -> int:
        return len(self.sections)

    def section(self, index: int) -> Section | None:
        return self.sections[index] if 0 <= index < len(self.sections) else None
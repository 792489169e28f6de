"""Hierarchical schema section: the scope and item names of a resource map."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, NamedTuple

_HNAMES = b"[def_hnamesx]  \0"
_NO_PARENT = 0xFFFF
_SCOPE_FLAG = 0x10
_ASCII_FLAG = 0x20


def _unpack(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return struct.unpack(fmt, data)


def _read_utf16z(stream: BinaryIO) -> str:
    chars = []
    while True:
        (code,) = _unpack(stream, "<H")
        if code == 0:
            return "".join(chars)
        chars.append(chr(code))


def _read_asciiz(stream: BinaryIO) -> str:
    chars = []
    while True:
        (code,) = _unpack(stream, "<B")
        if code == 0:
            return "".join(chars)
        chars.append(chr(code))


def _encode_utf16z(text: str) -> bytes:
    units = [ord(c) & 0xFFFF for c in text]
    units.append(0)
    return struct.pack(f"<{len(units)}H", *units)


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


class _ScopeAndItemInfo(NamedTuple):
    parent: int
    full_path_length: int
    is_scope: bool
    name_in_ascii: bool
    name_offset: int
    index: int

    @classmethod
    def read(cls, stream: BinaryIO) -> _ScopeAndItemInfo:
        parent, full_path_length, _upper, _name_len, flags, offset, index = _unpack(
            stream, "<HHHBBHH"
        )
        return cls(
            parent=parent,
            full_path_length=full_path_length,
            is_scope=bool(flags & _SCOPE_FLAG),
            name_in_ascii=bool(flags & _ASCII_FLAG),
            name_offset=offset | ((flags & 0xF) << 16),
            index=index,
        )

    def to_bytes(self) -> bytes:
        flags = (self.name_offset >> 16) & 0xF
        if self.is_scope:
            flags |= _SCOPE_FLAG
        if self.name_in_ascii:
            flags |= _ASCII_FLAG
        return struct.pack(
            "<HHHBBHH",
            self.parent & 0xFFFF,
            self.full_path_length & 0xFFFF,
            0,
            0,
            flags,
            self.name_offset & 0xFFFF,
            self.index & 0xFFFF,
        )


@dataclass(frozen=True)
class ResourceMapEntry:
    """A named scope or item with the index of its parent scope, if any."""

    parent: int | None = None
    name: str = ""


@dataclass
class HierarchicalSchema:
    """The names of a resource map's scopes and items."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_hschemaex] "

    unique_name: str = ""
    name: str = ""
    scopes: list[ResourceMapEntry] = field(default_factory=list)
    items: list[ResourceMapEntry] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> HierarchicalSchema:
        """Parse a hierarchical schema section body from a seekable binary stream."""
        version, unique_name_length, name_length, reserved = _unpack(stream, "<4H")
        if version != 1:
            raise ValueError(f"unsupported schema version {version}")
        if reserved != 0:
            raise ValueError("reserved schema field must be zero")
        if stream.read(16) != _HNAMES:
            raise ValueError("missing hierarchical names marker")
        _major, _minor, reserved, _checksum, num_scopes, num_items = _unpack(
            stream, "<HHIIII"
        )
        if reserved != 0:
            raise ValueError("reserved schema field must be zero")
        unique_name = _read_utf16z(stream)
        if _byte_length(unique_name) + 1 != unique_name_length:
            raise ValueError("unique name length mismatch")
        name = _read_utf16z(stream)
        if _byte_length(name) + 1 != name_length:
            raise ValueError("name length mismatch")
        zero1, _max_full_path_length, zero2 = _unpack(stream, "<3H")
        if zero1 != 0 or zero2 != 0:
            raise ValueError("reserved schema field must be zero")
        total, scopes_again, items_again, unicode_length, _, _ = _unpack(stream, "<6I")
        if total != num_scopes + num_items:
            raise ValueError("scope and item total mismatch")
        if scopes_again != num_scopes or items_again != num_items:
            raise ValueError("scope or item count mismatch")

        infos = [_ScopeAndItemInfo.read(stream) for _ in range(num_scopes + num_items)]
        for _ in range(num_scopes):
            *_, reserved = _unpack(stream, "<4H")
            if reserved != 0:
                raise ValueError("reserved scope field must be zero")
        _unpack(stream, f"<{num_items}H")

        unicode_offset = stream.tell()
        ascii_offset = unicode_offset + unicode_length * 2
        scopes = [ResourceMapEntry() for _ in range(num_scopes)]
        items = [ResourceMapEntry() for _ in range(num_items)]
        for info in infos:
            if info.name_in_ascii:
                position = ascii_offset + info.name_offset
            else:
                position = unicode_offset + info.name_offset * 2
            stream.seek(position, io.SEEK_SET)
            entry_name = ""
            if info.full_path_length != 0:
                reader = _read_asciiz if info.name_in_ascii else _read_utf16z
                entry_name = reader(stream)
            parent = None if info.parent == _NO_PARENT else info.parent
            target = scopes if info.is_scope else items
            if info.index >= len(target):
                raise ValueError("scope or item index out of range")
            target[info.index] = ResourceMapEntry(parent, entry_name)
        return cls(unique_name=unique_name, name=name, scopes=scopes, items=items)

    def write(self, stream: BinaryIO) -> None:
        """Serialize the section body to a binary stream."""
        num_scopes = len(self.scopes)
        num_items = len(self.items)
        stream.write(
            struct.pack(
                "<4H",
                1,
                (_byte_length(self.unique_name) + 1) & 0xFFFF,
                (_byte_length(self.name) + 1) & 0xFFFF,
                0,
            )
        )
        stream.write(_HNAMES)
        stream.write(struct.pack("<HHIIII", 1, 0, 0, 0, num_scopes, num_items))
        stream.write(_encode_utf16z(self.unique_name))
        stream.write(_encode_utf16z(self.name))
        stream.write(struct.pack("<3H", 0, 256, 0))
        stream.write(struct.pack("<6I", num_scopes + num_items, num_scopes, num_items, 0, 0, 0))

        infos: list[_ScopeAndItemInfo] = []
        unicode_strings = bytearray()
        entries = [(True, i, e) for i, e in enumerate(self.scopes)]
        entries += [(False, i, e) for i, e in enumerate(self.items)]
        for is_scope, index, entry in entries:
            infos.append(
                _ScopeAndItemInfo(
                    parent=_NO_PARENT if entry.parent is None else entry.parent,
                    full_path_length=_byte_length(entry.name),
                    is_scope=is_scope,
                    name_in_ascii=False,
                    name_offset=len(unicode_strings) // 2,
                    index=index,
                )
            )
            unicode_strings += _encode_utf16z(entry.name)

        for info in infos:
            stream.write(info.to_bytes())
        for index in range(num_scopes):
            stream.write(struct.pack("<4H", index & 0xFFFF, 0, 0, 0))
        stream.write(bytes(2 * num_items))
        stream.write(bytes(unicode_strings))
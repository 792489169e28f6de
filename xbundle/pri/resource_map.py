"""Resource map section: items, their groupings and candidate values."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar


def _unpack(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return struct.unpack(fmt, data)


@dataclass(frozen=True)
class ItemToItemInfoGroup:
    first_item: int = 0
    item_info_group: int = 0


@dataclass(frozen=True)
class ItemInfoGroup:
    group_size: int = 0
    first_item_info: int = 0


@dataclass(frozen=True)
class ItemInfo:
    decision: int = 0
    first_candidate: int = 0


@dataclass(frozen=True)
class CandidateInfo:
    resource_value_type: int
    source_file_index: int
    data_item_index: int
    data_item_section: int


class ResourceValueType(enum.Enum):
    STRING = 0
    PATH = 1
    EMBEDDED_DATA = 2
    ASCII_STRING = 3
    UTF8_STRING = 4
    ASCII_PATH = 5
    UTF8_PATH = 6


@dataclass(frozen=True)
class Candidate:
    qualifier_set: int
    ty: ResourceValueType
    data_item_section: int
    data_item_index: int


@dataclass
class CandidateSet:
    resource_map_item: int
    decision_index: int
    candidates: list[Candidate] = field(default_factory=list)


_HEADER = "<8H4I"


@dataclass
class ResourceMap:
    """Maps resource items to the candidates that can satisfy them."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_res_map2_]\0"

    hierarchical_schema_section: int = 0
    decision_info_section: int = 0
    item_to_item_info_groups: list[ItemToItemInfoGroup] = field(default_factory=list)
    item_info_groups: list[ItemInfoGroup] = field(default_factory=list)
    item_infos: list[ItemInfo] = field(default_factory=list)
    candidate_infos: list[CandidateInfo] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> ResourceMap:
        """Parse a resource map section body from a binary stream."""
        (
            env_refs_length,
            num_env_refs,
            schema_section,
            _schema_reference_length,
            decision_section,
            type_table_size,
            group_map_count,
            group_count,
            item_info_count,
            num_candidates,
            _data_length,
            large_table_length,
        ) = _unpack(stream, _HEADER)
        if env_refs_length != 0 or num_env_refs != 0:
            raise ValueError("environment references are not supported")
        if large_table_length != 0:
            raise ValueError("large tables are not supported")
        type_table = []
        for _ in range(type_table_size):
            size, value_type = _unpack(stream, "<II")
            if size != 4:
                raise ValueError("unexpected resource value type entry size")
            type_table.append(value_type)
        group_maps = [
            ItemToItemInfoGroup(*_unpack(stream, "<HH")) for _ in range(group_map_count)
        ]
        groups = [ItemInfoGroup(*_unpack(stream, "<HH")) for _ in range(group_count)]
        infos = [ItemInfo(*_unpack(stream, "<HH")) for _ in range(item_info_count)]
        candidates = []
        for _ in range(num_candidates):
            marker, type_index = _unpack(stream, "<BB")
            if marker != 0x01:
                raise ValueError("unexpected candidate marker")
            if type_index >= len(type_table):
                raise ValueError("candidate refers to unknown resource value type")
            source_file, data_index, data_section = _unpack(stream, "<HHH")
            candidates.append(
                CandidateInfo(type_table[type_index], source_file, data_index, data_section)
            )
        return cls(
            hierarchical_schema_section=schema_section,
            decision_info_section=decision_section,
            item_to_item_info_groups=group_maps,
            item_info_groups=groups,
            item_infos=infos,
            candidate_infos=candidates,
        )

    def write(self, stream: BinaryIO) -> None:
        """Serialize the resource map section body to a binary stream."""
        type_table = sorted({c.resource_value_type for c in self.candidate_infos})
        type_index = {value_type: i for i, value_type in enumerate(type_table)}
        stream.write(
            struct.pack(
                _HEADER,
                0,
                0,
                self.hierarchical_schema_section,
                0,
                self.decision_info_section,
                len(type_table) & 0xFFFF,
                len(self.item_to_item_info_groups) & 0xFFFF,
                len(self.item_info_groups) & 0xFFFF,
                len(self.item_infos) & 0xFFFFFFFF,
                len(self.candidate_infos) & 0xFFFFFFFF,
                0,
                0,
            )
        )
        for value_type in type_table:
            stream.write(struct.pack("<II", 4, value_type))
        for g in self.item_to_item_info_groups:
            stream.write(struct.pack("<HH", g.first_item & 0xFFFF, g.item_info_group & 0xFFFF))
        for g in self.item_info_groups:
            stream.write(struct.pack("<HH", g.group_size & 0xFFFF, g.first_item_info & 0xFFFF))
        for info in self.item_infos:
            stream.write(
                struct.pack("<HH", info.decision & 0xFFFF, info.first_candidate & 0xFFFF)
            )
        for c in self.candidate_infos:
            stream.write(
                struct.pack(
                    "<BBHHH",
                    0x01,
                    type_index[c.resource_value_type] & 0xFF,
                    c.source_file_index,
                    c.data_item_index,
                    c.data_item_section,
                )
            )
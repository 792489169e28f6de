"""Decision info section: qualifiers, qualifier sets and decisions of a PRI file."""

from __future__ import annotations

import enum
import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, NamedTuple


def _unpack(stream: BinaryIO, fmt: str) -> tuple:
    size = struct.calcsize(fmt)
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return struct.unpack(fmt, data)


class QualifierType(enum.IntEnum):
    LANGUAGE = 0
    CONTRAST = 1
    SCALE = 2
    HOME_REGION = 3
    TARGET_SIZE = 4
    LAYOUT_DIRECTION = 5
    THEME = 6
    ALTERNATE_FORM = 7
    DX_FEATURE_LEVEL = 8
    CONFIGURATION = 9
    DEVICE_FAMILY = 10
    CUSTOM = 11

    @classmethod
    def from_u16(cls, value: int) -> QualifierType | None:
        """Return the qualifier type with this wire value, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Qualifier:
    qualifier_type: QualifierType
    priority: int
    fallback_score: float
    value: str


@dataclass
class QualifierSet:
    qualifiers: list[int] = field(default_factory=list)


@dataclass
class Decision:
    qualifier_sets: list[int] = field(default_factory=list)


class _Slice(NamedTuple):
    first: int
    count: int


class _QualifierInfo(NamedTuple):
    index: int
    priority: int
    fallback_score: int


class _DistinctInfo(NamedTuple):
    qualifier_type: int
    operand_value_offset: int


def _lookup(index_table: list[int], entry: _Slice) -> list[int]:
    end = entry.first + entry.count
    if end > len(index_table):
        raise ValueError("index table reference out of range")
    return index_table[entry.first : end]


def _read_utf16z(stream: BinaryIO) -> str:
    chars = []
    while True:
        (code,) = _unpack(stream, "<H")
        if code == 0:
            return "".join(chars)
        chars.append(chr(code))


def _encode_utf16z(text: str) -> bytes:
    units = [ord(c) & 0xFFFF for c in text]
    units.append(0)
    return struct.pack(f"<{len(units)}H", *units)


@dataclass
class DecisionInfo:
    """Holds the qualifiers and the decisions built from them."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_decn_info]\0"

    qualifiers: list[Qualifier] = field(default_factory=list)
    qualifier_sets: list[QualifierSet] = field(default_factory=list)
    decisions: list[Decision] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> DecisionInfo:
        """Parse a decision info section body from a seekable binary stream."""
        (
            num_distinct,
            num_qualifiers,
            num_sets,
            num_decisions,
            num_index_entries,
            _total_length,
        ) = _unpack(stream, "<6H")
        decision_infos = [_Slice(*_unpack(stream, "<HH")) for _ in range(num_decisions)]
        set_infos = [_Slice(*_unpack(stream, "<HH")) for _ in range(num_sets)]
        qualifier_infos = []
        for _ in range(num_qualifiers):
            index, priority, fallback, reserved = _unpack(stream, "<4H")
            if reserved != 0:
                raise ValueError("reserved qualifier field must be zero")
            qualifier_infos.append(_QualifierInfo(index, priority, fallback))
        distinct_infos = []
        for _ in range(num_distinct):
            _, qualifier_type, _, _, offset = _unpack(stream, "<4HI")
            distinct_infos.append(_DistinctInfo(qualifier_type, offset))
        index_table = list(_unpack(stream, f"<{num_index_entries}H"))
        data_start = stream.tell()

        qualifiers = []
        for info in qualifier_infos:
            if info.index >= len(distinct_infos):
                raise ValueError("qualifier refers to unknown distinct qualifier")
            distinct = distinct_infos[info.index]
            qualifier_type = QualifierType.from_u16(distinct.qualifier_type)
            if qualifier_type is None:
                continue
            stream.seek(data_start + distinct.operand_value_offset * 2, io.SEEK_SET)
            qualifiers.append(
                Qualifier(
                    qualifier_type=qualifier_type,
                    priority=info.priority,
                    fallback_score=info.fallback_score / 1000.0,
                    value=_read_utf16z(stream),
                )
            )
        return cls(
            qualifiers=qualifiers,
            qualifier_sets=[QualifierSet(_lookup(index_table, s)) for s in set_infos],
            decisions=[Decision(_lookup(index_table, d)) for d in decision_infos],
        )

    def write(self, stream: BinaryIO) -> None:
        """Serialize the section body to a seekable binary stream."""
        values = bytearray()
        distinct: dict[tuple[int, str], int] = {}
        distinct_infos: list[_DistinctInfo] = []
        qualifier_infos: list[_QualifierInfo] = []
        for qualifier in self.qualifiers:
            key = (int(qualifier.qualifier_type), qualifier.value)
            if key not in distinct:
                distinct[key] = len(distinct_infos)
                distinct_infos.append(_DistinctInfo(key[0], len(values) // 2))
                values += _encode_utf16z(qualifier.value)
            score = min(max(round(qualifier.fallback_score * 1000.0), 0), 0xFFFF)
            qualifier_infos.append(_QualifierInfo(distinct[key], qualifier.priority, score))

        index_table: list[int] = []
        set_infos = []
        for qualifier_set in self.qualifier_sets:
            set_infos.append(_Slice(len(index_table), len(qualifier_set.qualifiers)))
            index_table.extend(qualifier_set.qualifiers)
        decision_infos = []
        for decision in self.decisions:
            decision_infos.append(_Slice(len(index_table), len(decision.qualifier_sets)))
            index_table.extend(decision.qualifier_sets)

        stream.write(
            struct.pack(
                "<6H",
                len(distinct_infos) & 0xFFFF,
                len(qualifier_infos) & 0xFFFF,
                len(set_infos) & 0xFFFF,
                len(decision_infos) & 0xFFFF,
                len(index_table) & 0xFFFF,
                0,
            )
        )
        start = stream.tell()
        for info in (*decision_infos, *set_infos):
            stream.write(struct.pack("<HH", info.first & 0xFFFF, info.count & 0xFFFF))
        for info in qualifier_infos:
            stream.write(struct.pack("<4H", info.index & 0xFFFF, info.priority, info.fallback_score, 0))
        for info in distinct_infos:
            stream.write(
                struct.pack("<4HI", 0, info.qualifier_type, 0, 0, info.operand_value_offset)
            )
        stream.write(struct.pack(f"<{len(index_table)}H", *(i & 0xFFFF for i in index_table)))
        stream.write(bytes(values))
        end = stream.tell()
        stream.seek(start - 2, io.SEEK_SET)
        stream.write(struct.pack("<H", (end - start) & 0xFFFF))
        stream.seek(end, io.SEEK_SET)

    def num_qualifiers(self) -> int:
        return len(self.qualifiers)

    def qualifier(self, index: int) -> Qualifier | None:
        return self.qualifiers[index] if 0 <= index < len(self.qualifiers) else None

    def add_qualifier(self, qualifier: Qualifier) -> int:
        self.qualifiers.append(qualifier)
        return len(self.qualifiers) - 1

    def num_qualifier_sets(self) -> int:
        return len(self.qualifier_sets)

    def qualifier_set(self, index: int) -> QualifierSet | None:
        return self.qualifier_sets[index] if 0 <= index < len(self.qualifier_sets) else None

    def add_qualifier_set(self, qualifier_set: QualifierSet) -> int:
        self.qualifier_sets.append(qualifier_set)
        return len(self.qualifier_sets) - 1

    def num_decisions(self) -> int:
        return len(self.decisions)

    def decision(self, index: int) -> Decision | None:
        return self.decisions[index] if 0 <= index < len(self.decisions) else None

    def add_decision(self, decision: Decision) -> int:
        self.decisions.append(decision)
        return len(self.decisions) - 1
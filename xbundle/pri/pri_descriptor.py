"""PRI descriptor section: indices of the other sections in a PRI file."""

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


class PriDescriptorFlags(enum.IntFlag):
    AUTO_MERGE = 1
    IS_DEPLOYMENT_MERGEABLE = 2
    IS_DEPLOYMENT_MERGE_RESULT = 4
    IS_AUTOMERGE_MERGE_RESULT = 8


@dataclass
class PriDescriptor:
    """Lists which sections hold schemas, decisions, resource maps and data."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_pridescex]\0"

    pri_flags: int = 0
    included_file_list_section: bool = False
    hierarchical_schema_sections: list[int] = field(default_factory=list)
    decision_info_sections: list[int] = field(default_factory=list)
    resource_map_sections: list[int] = field(default_factory=list)
    primary_resource_map_section: int | None = None
    referenced_file_sections: list[int] = field(default_factory=list)
    data_item_sections: list[int] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> PriDescriptor:
        """Parse a descriptor section body from a binary stream."""
        (
            pri_flags,
            included,
            reserved,
            num_schemas,
            num_decisions,
            num_maps,
            primary,
            num_referenced,
            num_data_items,
            reserved2,
        ) = _unpack(stream, "<10H")
        if reserved != 0 or reserved2 != 0:
            raise ValueError("reserved descriptor fields must be zero")

        def ids(count: int) -> list[int]:
            return list(_unpack(stream, f"<{count}H"))

        return cls(
            pri_flags=pri_flags,
            included_file_list_section=included == 0xFFFF,
            hierarchical_schema_sections=ids(num_schemas),
            decision_info_sections=ids(num_decisions),
            resource_map_sections=ids(num_maps),
            primary_resource_map_section=None if primary == 0xFFF else primary,
            referenced_file_sections=ids(num_referenced),
            data_item_sections=ids(num_data_items),
        )

    def write(self, stream: BinaryIO) -> None:
        """Serialize the descriptor section body to a binary stream."""
        primary = (
            0xFFFF
            if self.primary_resource_map_section is None
            else self.primary_resource_map_section
        )
        stream.write(
            struct.pack(
                "<10H",
                int(self.pri_flags),
                0xFFFF if self.included_file_list_section else 0,
                0,
                len(self.hierarchical_schema_sections) & 0xFFFF,
                len(self.decision_info_sections) & 0xFFFF,
                len(self.resource_map_sections) & 0xFFFF,
                primary,
                len(self.referenced_file_sections) & 0xFFFF,
                len(self.data_item_sections) & 0xFFFF,
                0,
            )
        )
        for ids in (
            self.hierarchical_schema_sections,
            self.decision_info_sections,
            self.resource_map_sections,
            self.referenced_file_sections,
            self.data_item_sections,
        ):
            stream.write(struct.pack(f"<{len(ids)}H", *ids))
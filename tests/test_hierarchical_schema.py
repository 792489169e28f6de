import io
import struct

import pytest

from xbundle.pri.hierarchical_schema import HierarchicalSchema, ResourceMapEntry


def _sample() -> HierarchicalSchema:
    return HierarchicalSchema(
        unique_name="ms-appx://example/",
        name="example",
        scopes=[
            ResourceMapEntry(None, "Files"),
            ResourceMapEntry(0, "Images"),
        ],
        items=[
            ResourceMapEntry(1, "Logo.png"),
            ResourceMapEntry(0, "readme.txt"),
            ResourceMapEntry(None, ""),
        ],
    )


def _to_bytes(schema: HierarchicalSchema) -> bytes:
    buf = io.BytesIO()
    schema.write(buf)
    return buf.getvalue()


def test_round_trip():
    schema = _sample()
    parsed = HierarchicalSchema.read(io.BytesIO(_to_bytes(schema)))
    assert parsed == schema


def test_round_trip_empty():
    schema = HierarchicalSchema()
    parsed = HierarchicalSchema.read(io.BytesIO(_to_bytes(schema)))
    assert parsed == schema
    assert parsed.scopes == []
    assert parsed.items == []
    assert parsed.IDENTIFIER == b"[mrm_hschemaex] "


def test_header_bytes():
    schema = _sample()
    data = _to_bytes(schema)
    assert struct.unpack_from("<4H", data) == (
        1,
        len(schema.unique_name) + 1,
        len(schema.name) + 1,
        0,
    )
    assert data[8:24] == b"[def_hnamesx]  \0"


def test_parent_zero_is_kept_distinct_from_none():
    schema = HierarchicalSchema(
        unique_name="u",
        name="n",
        scopes=[ResourceMapEntry(None, "root")],
        items=[ResourceMapEntry(0, "child")],
    )
    parsed = HierarchicalSchema.read(io.BytesIO(_to_bytes(schema)))
    assert parsed.scopes[0].parent is None
    assert parsed.items[0].parent == 0


def test_bad_version_rejected():
    data = bytearray(_to_bytes(_sample()))
    data[0:2] = struct.pack("<H", 2)
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_bad_marker_rejected():
    data = bytearray(_to_bytes(_sample()))
    data[8] = ord("x")
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_name_length_mismatch_rejected():
    data = bytearray(_to_bytes(_sample()))
    data[2:4] = struct.pack("<H", 3)
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_truncated_stream_rejected():
    data = _to_bytes(_sample())
    with pytest.raises(EOFError):
        HierarchicalSchema.read(io.BytesIO(data[:30]))


def test_rewrite_is_stable():
    data = _to_bytes(_sample())
    parsed = HierarchicalSchema.read(io.BytesIO(data))
    assert _to_bytes(parsed) == data
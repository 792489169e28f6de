import io

import pytest

from xbundle.pri.data_item import DataItem
from xbundle.pri.decision_info import (
    Decision,
    DecisionInfo,
    Qualifier,
    QualifierSet,
    QualifierType,
)
from xbundle.pri.hierarchical_schema import HierarchicalSchema, ResourceMapEntry
from xbundle.pri.pri_descriptor import PriDescriptor
from xbundle.pri.pri_file import (
    PriFile,
    Section,
    UnknownSection,
    read_section_data,
    section_identifier,
)
from xbundle.pri.resource_map import CandidateInfo, ItemInfo, ItemInfoGroup, ResourceMap


def _sample_pri() -> PriFile:
    data_item = DataItem()
    data_item.add_string("Hello")
    data_item.add_string("World")
    data_item.add_blob(b"\x01\x02\x03")
    decisions = DecisionInfo(
        qualifiers=[
            Qualifier(QualifierType.LANGUAGE, 700, 0.5, "en-US"),
            Qualifier(QualifierType.SCALE, 200, 0.0, "100"),
        ],
        qualifier_sets=[QualifierSet([0]), QualifierSet([0, 1])],
        decisions=[Decision([0, 1])],
    )
    schema = HierarchicalSchema(
        unique_name="ms-appx://app/",
        name="app",
        scopes=[ResourceMapEntry(None, "Files"), ResourceMapEntry(0, "Images")],
        items=[ResourceMapEntry(1, "logo.png")],
    )
    resource_map = ResourceMap(
        hierarchical_schema_section=1,
        decision_info_section=2,
        item_info_groups=[ItemInfoGroup(1, 0)],
        item_infos=[ItemInfo(0, 0)],
        candidate_infos=[
            CandidateInfo(0, 0, 0, 4),
            CandidateInfo(2, 0, 0, 4),
        ],
    )
    descriptor = PriDescriptor(
        pri_flags=1,
        hierarchical_schema_sections=[1],
        decision_info_sections=[2],
        resource_map_sections=[3],
        primary_resource_map_section=3,
        data_item_sections=[4],
    )
    unknown = UnknownSection(identifier=b"[mrm_unknown__]\0", data=b"abcdef")
    pri = PriFile()
    for qualifier, data in enumerate(
        [descriptor, schema, decisions, resource_map, data_item, unknown]
    ):
        pri.add_section(Section(section_qualifier=qualifier, flags=0, section_flags=0, data=data))
    return pri


def _to_bytes(pri: PriFile) -> bytes:
    buf = io.BytesIO()
    pri.write(buf)
    return buf.getvalue()


def test_parse_gen_parse():
    pri = _sample_pri()
    pri2 = PriFile.read(io.BytesIO(_to_bytes(pri)))
    assert pri2.num_sections() == pri.num_sections()
    for i in range(pri.num_sections()):
        assert pri.section(i) == pri2.section(i)


def test_read_write_read_is_stable():
    first = _to_bytes(_sample_pri())
    second = _to_bytes(PriFile.read(io.BytesIO(first)))
    assert first == second


def test_header_and_trailer_layout():
    data = _to_bytes(_sample_pri())
    assert data[:8] == b"mrm_pri2"
    assert int.from_bytes(data[12:16], "little") == len(data)
    assert int.from_bytes(data[-16:-12], "little") == 0xDEFFFADE
    assert int.from_bytes(data[-12:-8], "little") == len(data)
    assert data[-8:] == b"mrm_pri2"


def test_bad_magic_rejected():
    data = b"not_pri!" + _to_bytes(_sample_pri())[8:]
    with pytest.raises(ValueError):
        PriFile.read(io.BytesIO(data))


def test_trailer_version_mismatch_rejected():
    data = bytearray(_to_bytes(_sample_pri()))
    data[-8:] = b"mrm_pri0"
    with pytest.raises(ValueError):
        PriFile.read(io.BytesIO(bytes(data)))


def test_truncated_file_raises():
    with pytest.raises(EOFError):
        PriFile.read(io.BytesIO(b"mrm_pri2\x00"))


def test_create_and_open(tmp_path):
    path = tmp_path / "resources.pri"
    pri = _sample_pri()
    pri.create(path)
    assert PriFile.open(path) == pri


def test_section_lookup_out_of_range():
    pri = _sample_pri()
    assert pri.section(pri.num_sections()) is None
    assert pri.section(-1) is None


def test_section_identifier():
    assert section_identifier(DataItem()) == DataItem.IDENTIFIER
    assert section_identifier(ResourceMap()) == b"[mrm_res_map2_]\0"
    unknown = UnknownSection(identifier=b"[something_else]", data=b"")
    assert section_identifier(unknown) == b"[something_else]"
    with pytest.raises(TypeError):
        section_identifier(object())


def test_read_section_data_dispatches():
    buf = io.BytesIO()
    descriptor = PriDescriptor(resource_map_sections=[2], primary_resource_map_section=2)
    descriptor.write(buf)
    buf.seek(0)
    assert read_section_data(PriDescriptor.IDENTIFIER, len(buf.getvalue()), buf) == descriptor


def test_read_section_data_unknown_keeps_bytes():
    result = read_section_data(b"[mrm_mystery__]\0", 4, io.BytesIO(b"wxyzrest"))
    assert result == UnknownSection(b"[mrm_mystery__]\0", b"wxyz")


def test_section_round_trip_and_trailer():
    section = Section(section_qualifier=7, flags=1, section_flags=2, data=DataItem())
    buf = io.BytesIO()
    section.write(buf)
    data = buf.getvalue()
    assert int.from_bytes(data[-8:-4], "little") == 0xDEF5FADE
    assert int.from_bytes(data[-4:], "little") == len(data)
    buf.seek(0)
    assert Section.read(buf) == section
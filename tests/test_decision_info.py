import io
import struct

import pytest

from xbundle.pri.decision_info import (
    Decision,
    DecisionInfo,
    Qualifier,
    QualifierSet,
    QualifierType,
)


def _sample() -> DecisionInfo:
    info = DecisionInfo()
    en = info.add_qualifier(Qualifier(QualifierType.LANGUAGE, 700, 0.5, "en-US"))
    scale = info.add_qualifier(Qualifier(QualifierType.SCALE, 500, 0.25, "200"))
    dup = info.add_qualifier(Qualifier(QualifierType.LANGUAGE, 600, 0.0, "en-US"))
    s0 = info.add_qualifier_set(QualifierSet([]))
    s1 = info.add_qualifier_set(QualifierSet([en, scale]))
    s2 = info.add_qualifier_set(QualifierSet([dup]))
    info.add_decision(Decision([s0]))
    info.add_decision(Decision([s1, s2, s0]))
    return info


def _write(info: DecisionInfo) -> bytes:
    buf = io.BytesIO()
    info.write(buf)
    return buf.getvalue()


def test_round_trip():
    info = _sample()
    again = DecisionInfo.read(io.BytesIO(_write(info)))
    assert again == info


def test_empty_section_is_header_only():
    assert _write(DecisionInfo()) == b"\0" * 12


def test_total_length_is_patched():
    data = _write(_sample())
    (total,) = struct.unpack_from("<H", data, 10)
    assert total == len(data) - 12


def test_write_after_prefix_and_read_back():
    buf = io.BytesIO()
    buf.write(b"PREFIX")
    _sample().write(buf)
    assert buf.tell() == len(buf.getvalue())
    buf.seek(6)
    assert DecisionInfo.read(buf) == _sample()


def _raw(qualifier_type: int, reserved: int = 0) -> bytes:
    header = struct.pack("<6H", 1, 1, 0, 0, 0, 0)
    qualifier = struct.pack("<4H", 0, 1, 0, reserved)
    distinct = struct.pack("<4HI", 0, qualifier_type, 0, 0, 0)
    values = struct.pack("<2H", ord("x"), 0)
    return header + qualifier + distinct + values


def test_read_known_qualifier():
    info = DecisionInfo.read(io.BytesIO(_raw(0)))
    assert info.num_qualifiers() == 1
    assert info.qualifier(0) == Qualifier(QualifierType.LANGUAGE, 1, 0.0, "x")


def test_read_skips_unknown_qualifier_type():
    info = DecisionInfo.read(io.BytesIO(_raw(99)))
    assert info.num_qualifiers() == 0


def test_nonzero_reserved_field_is_rejected():
    with pytest.raises(ValueError):
        DecisionInfo.read(io.BytesIO(_raw(0, reserved=1)))


def test_truncated_stream_raises():
    with pytest.raises(EOFError):
        DecisionInfo.read(io.BytesIO(_write(_sample())[:20]))


def test_accessors_out_of_range():
    info = _sample()
    assert info.qualifier(3) is None
    assert info.qualifier_set(-1) is None
    assert info.decision(2) is None
    assert info.decision(1) == Decision([1, 2, 0])
    assert info.num_qualifier_sets() == 3
    assert info.num_decisions() == 2


def test_add_returns_indices():
    info = DecisionInfo()
    assert info.add_decision(Decision([])) == 0
    assert info.add_decision(Decision([0])) == 1


@pytest.mark.parametrize("value", range(12))
def test_qualifier_type_from_u16_known(value):
    assert QualifierType.from_u16(value) == value


def test_qualifier_type_from_u16_unknown():
    assert QualifierType.from_u16(12) is None
    assert QualifierType.from_u16(11) is QualifierType.CUSTOM
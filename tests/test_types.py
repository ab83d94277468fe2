"""
Composite Key Type Registry Tests
=================================
Tag table, value classification, and per-type payload encoding:
  ✔ tag numeric order
  ✔ classification of plain Python values
  ✔ fixed and length-prefixed payload layout
  ✔ oversize and unsupported values rejected
  ✔ truncated and unknown components rejected on decode
"""

import os
import struct
import sys
import uuid

import pytest

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from composite.errors import DecodeError, OversizeValueError, UnsupportedValueError
from composite.placeholders import MATCH_MAXIMUM, MATCH_MINIMUM
from composite.types import (
    Component, ComponentType, FIXED_SIZES, HEADER, LONG_MAX, LONG_MIN,
    MAX_VARIABLE_LENGTH, classify, deserialize_component, fixed_size,
    is_fixed_size, is_registered, payload_bounds, serialize_component,
    type_from_string,
)


V1_UUID = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")
V4_UUID = uuid.UUID("16fd2706-8baf-433b-82eb-8c7fada847da")


# ═══════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════

class TestRegistry:
    """The tag table itself."""

    def test_tag_order(self):
        order = [
            ComponentType.STOP, ComponentType.MATCH_MINIMUM, ComponentType.BOOL,
            ComponentType.LONG, ComponentType.DOUBLE, ComponentType.TIME_UUID,
            ComponentType.LEXICAL_UUID, ComponentType.ASCII, ComponentType.UTF8,
            ComponentType.BYTES, ComponentType.MATCH_MAXIMUM,
        ]
        assert [int(t) for t in order] == [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 255]

    def test_header(self):
        assert HEADER == b"CMP\x01"

    def test_fixed_sizes(self):
        assert fixed_size(ComponentType.BOOL) == 1
        assert fixed_size(ComponentType.LONG) == 8
        assert fixed_size(ComponentType.DOUBLE) == 8
        assert fixed_size(ComponentType.TIME_UUID) == 16
        assert fixed_size(ComponentType.LEXICAL_UUID) == 16
        assert fixed_size(ComponentType.MATCH_MINIMUM) == 0

    def test_variable_types_have_no_fixed_size(self):
        for ctype in (ComponentType.ASCII, ComponentType.UTF8, ComponentType.BYTES):
            assert not is_fixed_size(ctype)
            assert fixed_size(ctype) is None
            assert ctype not in FIXED_SIZES

    def test_is_registered(self):
        assert is_registered(0)
        assert is_registered(9)
        assert is_registered(255)
        assert not is_registered(10)
        assert not is_registered(0x42)

    def test_type_from_string(self):
        assert type_from_string("utf8") == ComponentType.UTF8
        assert type_from_string("  Lexical_UUID ") == ComponentType.LEXICAL_UUID
        with pytest.raises(ValueError, match="Unknown component type"):
            type_from_string("varchar")


# ═══════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════

class TestClassify:
    """Plain Python values map onto component types."""

    def test_bool_before_int(self):
        assert classify(True) == ComponentType.BOOL
        assert classify(False) == ComponentType.BOOL

    def test_int_is_long(self):
        assert classify(256) == ComponentType.LONG

    def test_float_is_double(self):
        assert classify(1.5) == ComponentType.DOUBLE

    def test_uuid_by_version(self):
        assert classify(V1_UUID) == ComponentType.TIME_UUID
        assert classify(V4_UUID) == ComponentType.LEXICAL_UUID

    def test_str_default_and_override(self):
        assert classify("abc") == ComponentType.UTF8
        assert classify("abc", ComponentType.ASCII) == ComponentType.ASCII

    def test_bytes_like(self):
        assert classify(b"x") == ComponentType.BYTES
        assert classify(bytearray(b"x")) == ComponentType.BYTES
        assert classify(memoryview(b"x")) == ComponentType.BYTES

    def test_placeholders(self):
        assert classify(MATCH_MINIMUM) == ComponentType.MATCH_MINIMUM
        assert classify(MATCH_MAXIMUM) == ComponentType.MATCH_MAXIMUM

    def test_explicit_component(self):
        assert classify(Component(ComponentType.ASCII, "abc")) == ComponentType.ASCII

    def test_explicit_component_unknown_tag(self):
        with pytest.raises(UnsupportedValueError):
            classify(Component(0x42, "abc"))

    @pytest.mark.parametrize("value", [None, object(), {"a": 1}, {1, 2}, 1j])
    def test_unsupported(self, value):
        with pytest.raises(UnsupportedValueError, match="cannot be encoded"):
            classify(value)


# ═══════════════════════════════════════════════════════════════════
# Serialization
# ═══════════════════════════════════════════════════════════════════

class TestSerialize:
    """Component record layout."""

    def test_bool(self):
        assert serialize_component(ComponentType.BOOL, True) == b"\x02\x01"
        assert serialize_component(ComponentType.BOOL, False) == b"\x02\x00"

    @pytest.mark.parametrize("value", ["false", 0, 1, None, object()])
    def test_bool_requires_bool(self, value):
        with pytest.raises(UnsupportedValueError, match="requires a bool"):
            serialize_component(ComponentType.BOOL, value)

    def test_long(self):
        assert serialize_component(ComponentType.LONG, 256) == b"\x03" + struct.pack(">q", 256)
        assert serialize_component(ComponentType.LONG, -1) == b"\x03" + b"\xff" * 8

    def test_long_limits(self):
        serialize_component(ComponentType.LONG, LONG_MIN)
        serialize_component(ComponentType.LONG, LONG_MAX)
        with pytest.raises(OversizeValueError, match="64-bit"):
            serialize_component(ComponentType.LONG, LONG_MAX + 1)
        with pytest.raises(OversizeValueError):
            serialize_component(ComponentType.LONG, LONG_MIN - 1)

    def test_long_rejects_float(self):
        with pytest.raises(UnsupportedValueError, match="integer"):
            serialize_component(ComponentType.LONG, 1.5)

    def test_double(self):
        assert serialize_component(ComponentType.DOUBLE, 1.5) == b"\x04" + struct.pack(">d", 1.5)

    def test_double_rejects_str(self):
        with pytest.raises(UnsupportedValueError):
            serialize_component(ComponentType.DOUBLE, "1.5")

    def test_uuid(self):
        assert serialize_component(ComponentType.LEXICAL_UUID, V4_UUID) == b"\x06" + V4_UUID.bytes
        assert serialize_component(ComponentType.TIME_UUID, V1_UUID) == b"\x05" + V1_UUID.bytes

    def test_uuid_rejects_str(self):
        with pytest.raises(UnsupportedValueError, match="uuid.UUID"):
            serialize_component(ComponentType.TIME_UUID, str(V1_UUID))

    def test_utf8_length_prefix(self):
        raw = "héllo".encode("utf-8")
        assert serialize_component(ComponentType.UTF8, "héllo") == b"\x08" + struct.pack(">H", len(raw)) + raw

    def test_ascii(self):
        assert serialize_component(ComponentType.ASCII, "ab") == b"\x07\x00\x02ab"

    def test_ascii_rejects_non_ascii(self):
        with pytest.raises(UnsupportedValueError, match="ASCII"):
            serialize_component(ComponentType.ASCII, "héllo")

    def test_bytes(self):
        assert serialize_component(ComponentType.BYTES, b"\x00\xff") == b"\x09\x00\x02\x00\xff"

    def test_bytes_max_length(self):
        record = serialize_component(ComponentType.BYTES, b"x" * MAX_VARIABLE_LENGTH)
        assert len(record) == 1 + 2 + MAX_VARIABLE_LENGTH

    def test_bytes_oversize(self):
        with pytest.raises(OversizeValueError, match="too long"):
            serialize_component(ComponentType.BYTES, b"x" * (MAX_VARIABLE_LENGTH + 1))

    def test_placeholders_have_no_payload(self):
        assert serialize_component(ComponentType.MATCH_MINIMUM) == b"\x01"
        assert serialize_component(ComponentType.MATCH_MAXIMUM) == b"\xff"

    def test_stop_is_not_a_value(self):
        with pytest.raises(UnsupportedValueError):
            serialize_component(ComponentType.STOP)


# ═══════════════════════════════════════════════════════════════════
# Deserialization
# ═══════════════════════════════════════════════════════════════════

class TestDeserialize:
    """Reading single component records."""

    def test_component_and_offset(self):
        data = serialize_component(ComponentType.UTF8, "abc") + b"\x00"
        component, offset = deserialize_component(data, 0)
        assert component == Component(ComponentType.UTF8, "abc")
        assert offset == 6

    def test_bool_nonzero_is_true(self):
        component, _ = deserialize_component(b"\x02\x07", 0)
        assert component.value is True

    def test_placeholder_singletons(self):
        component, offset = deserialize_component(b"\xff", 0)
        assert component.value is MATCH_MAXIMUM
        assert offset == 1

    def test_unknown_tag(self):
        with pytest.raises(DecodeError, match="Unknown component type 0x42"):
            payload_bounds(b"\x42\x00", 0, 0x42)

    def test_truncated_fixed(self):
        with pytest.raises(DecodeError, match="Truncated LONG"):
            deserialize_component(b"\x03\x00\x00", 0)

    def test_truncated_length_prefix(self):
        with pytest.raises(DecodeError, match="length prefix"):
            deserialize_component(b"\x08\x00", 0)

    def test_declared_length_exceeds_buffer(self):
        with pytest.raises(DecodeError, match="Truncated UTF8"):
            deserialize_component(b"\x08\x00\x05ab", 0)

    def test_invalid_utf8(self):
        with pytest.raises(DecodeError, match="utf-8"):
            deserialize_component(b"\x08\x00\x02\xc3\x28", 0)

    def test_stop_is_not_a_component(self):
        with pytest.raises(DecodeError, match="STOP"):
            deserialize_component(b"\x00", 0)

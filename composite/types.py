"""
Composite Key Type Registry
===========================
The fixed table of component types: one-byte tag, length rule, payload
encoding and decoding. The comparison rule for each tag lives in
comparator.py and follows the same table.

Binary layout of a composite value:
  [magic: 3B "CMP"] [version: 1B] [component]* [STOP: 1B = 0x00]

Component record:
  [tag: 1B] [length: 2B, variable-length types only] [payload]

  Tag  Type           Payload
  ---  -------------  ------------------------------------------
  0    STOP           none (terminator)
  1    MATCH_MINIMUM  none (placeholder)
  2    BOOL           1 byte, 0x00 / 0x01
  3    LONG           8 bytes, signed big-endian
  4    DOUBLE         8 bytes, IEEE 754 big-endian
  5    TIME_UUID      16 bytes, RFC 4122 byte order
  6    LEXICAL_UUID   16 bytes, RFC 4122 byte order
  7    ASCII          length-prefixed US-ASCII text
  8    UTF8           length-prefixed UTF-8 text
  9    BYTES          length-prefixed raw bytes
  255  MATCH_MAXIMUM  none (placeholder)

Tag order is significant: components of different types order by tag
value. New types must be appended at the numeric end of the table.

Endianness: ALL multi-byte integers use BIG-ENDIAN (network byte order).
"""

import operator
import struct
import uuid
from enum import IntEnum
from typing import Any, NamedTuple, Optional, Tuple

from composite.errors import DecodeError, OversizeValueError, UnsupportedValueError
from composite.placeholders import Placeholder, placeholder_for


class ComponentType(IntEnum):
    """Component type tags, in comparison order."""
    STOP = 0x00
    MATCH_MINIMUM = 0x01
    BOOL = 0x02
    LONG = 0x03
    DOUBLE = 0x04
    TIME_UUID = 0x05
    LEXICAL_UUID = 0x06
    ASCII = 0x07
    UTF8 = 0x08
    BYTES = 0x09
    MATCH_MAXIMUM = 0xFF


class Component(NamedTuple):
    """An explicitly tagged component value."""
    type: ComponentType
    value: Any


# ─── Header ─────────────────────────────────────────────────────────────────

MAGIC = b"CMP"
FORMAT_VERSION = 1
HEADER = MAGIC + bytes([FORMAT_VERSION])
HEADER_SIZE = len(HEADER)           # 4
STOP_MARKER = bytes([ComponentType.STOP])

# ─── Size constants ─────────────────────────────────────────────────────────

FIXED_SIZES: dict[int, int] = {
    ComponentType.STOP: 0,
    ComponentType.MATCH_MINIMUM: 0,
    ComponentType.BOOL: 1,
    ComponentType.LONG: 8,          # int64 big-endian
    ComponentType.DOUBLE: 8,        # IEEE 754 double
    ComponentType.TIME_UUID: 16,
    ComponentType.LEXICAL_UUID: 16,
    ComponentType.MATCH_MAXIMUM: 0,
}

# ASCII, UTF8 and BYTES: 2-byte length prefix + payload
VARIABLE_TYPES = frozenset({
    ComponentType.ASCII, ComponentType.UTF8, ComponentType.BYTES,
})

LENGTH_PREFIX_SIZE = 2
MAX_VARIABLE_LENGTH = 0xFFFF
LONG_MIN = -(1 << 63)
LONG_MAX = (1 << 63) - 1

LENGTH_STRUCT = struct.Struct(">H")
LONG_STRUCT = struct.Struct(">q")
DOUBLE_STRUCT = struct.Struct(">d")

_REGISTERED_TAGS = frozenset(int(t) for t in ComponentType)


def is_registered(tag: int) -> bool:
    """Return True if the tag belongs to the registry."""
    return tag in _REGISTERED_TAGS


def is_fixed_size(ctype: int) -> bool:
    """Return True if the component type has a fixed payload size."""
    return ctype in FIXED_SIZES


def fixed_size(ctype: int) -> Optional[int]:
    """Return the fixed payload size, or None for variable-length types."""
    return FIXED_SIZES.get(ctype)


def is_placeholder(ctype: int) -> bool:
    return ctype == ComponentType.MATCH_MINIMUM or ctype == ComponentType.MATCH_MAXIMUM


def type_from_string(type_str: str) -> ComponentType:
    """Convert a string like 'utf8' or 'LEXICAL_UUID' to a ComponentType."""
    normalized = type_str.strip().upper()
    try:
        return ComponentType[normalized]
    except KeyError:
        raise ValueError(f"Unknown component type: {type_str!r}. "
                         f"Valid types: {[t.name for t in ComponentType]}")


# ─── Classification ─────────────────────────────────────────────────────────

def is_time_based(value: uuid.UUID) -> bool:
    """A version-1 UUID carries a meaningful embedded timestamp."""
    return value.version == 1


def classify(value: Any, string_type: ComponentType = ComponentType.UTF8) -> ComponentType:
    """
    Pick the component type for a plain Python value.

    bool is checked before int (bool is an int subclass). Plain str values
    take ``string_type``. Raises UnsupportedValueError for anything else.
    """
    if isinstance(value, Component):
        try:
            return ComponentType(value.type)
        except ValueError:
            raise UnsupportedValueError(f"Unknown component type: {value.type!r}")
    if isinstance(value, Placeholder):
        return ComponentType(value.tag)
    if isinstance(value, bool):
        return ComponentType.BOOL
    if isinstance(value, int):
        return ComponentType.LONG
    if isinstance(value, float):
        return ComponentType.DOUBLE
    if isinstance(value, uuid.UUID):
        if is_time_based(value):
            return ComponentType.TIME_UUID
        return ComponentType.LEXICAL_UUID
    if isinstance(value, str):
        return string_type
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ComponentType.BYTES
    raise UnsupportedValueError(
        f"{type(value).__name__} values cannot be encoded in a composite key")


# ─── Serialization ──────────────────────────────────────────────────────────

def serialize_component(ctype: ComponentType, value: Any = None) -> bytes:
    """
    Serialize one component record: tag, optional length prefix, payload.
    Raises UnsupportedValueError or OversizeValueError if the value does
    not fit the type.
    """
    tag = bytes([ctype])

    if ctype == ComponentType.BOOL:
        if not isinstance(value, bool):
            raise UnsupportedValueError(
                f"BOOL component requires a bool, got {type(value).__name__}")
        return tag + (b"\x01" if value else b"\x00")

    elif ctype == ComponentType.LONG:
        try:
            ival = operator.index(value)
        except TypeError:
            raise UnsupportedValueError(
                f"LONG component requires an integer, got {type(value).__name__}")
        if not LONG_MIN <= ival <= LONG_MAX:
            raise OversizeValueError(
                f"Integer {ival} does not fit in a signed 64-bit LONG component")
        return tag + LONG_STRUCT.pack(ival)

    elif ctype == ComponentType.DOUBLE:
        if isinstance(value, (str, bytes, bytearray)):
            raise UnsupportedValueError(
                f"DOUBLE component requires a number, got {type(value).__name__}")
        try:
            fval = float(value)
        except (TypeError, ValueError):
            raise UnsupportedValueError(
                f"DOUBLE component requires a number, got {type(value).__name__}")
        return tag + DOUBLE_STRUCT.pack(fval)

    elif ctype == ComponentType.TIME_UUID or ctype == ComponentType.LEXICAL_UUID:
        if not isinstance(value, uuid.UUID):
            raise UnsupportedValueError(
                f"{ctype.name} component requires a uuid.UUID, got {type(value).__name__}")
        return tag + value.bytes

    elif ctype == ComponentType.ASCII:
        payload = _encode_text(value, "ascii", ctype)
        return tag + _length_prefixed(payload, ctype)

    elif ctype == ComponentType.UTF8:
        payload = _encode_text(value, "utf-8", ctype)
        return tag + _length_prefixed(payload, ctype)

    elif ctype == ComponentType.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise UnsupportedValueError(
                f"BYTES component requires a bytes-like value, got {type(value).__name__}")
        return tag + _length_prefixed(bytes(value), ctype)

    elif is_placeholder(ctype):
        return tag

    raise UnsupportedValueError(f"Cannot serialize component type: {ctype!r}")


def _encode_text(value: Any, encoding: str, ctype: ComponentType) -> bytes:
    if not isinstance(value, str):
        raise UnsupportedValueError(
            f"{ctype.name} component requires a str, got {type(value).__name__}")
    try:
        return value.encode(encoding)
    except UnicodeEncodeError as e:
        raise UnsupportedValueError(
            f"Text cannot be encoded as {ctype.name}: {e.reason}") from e


def _length_prefixed(payload: bytes, ctype: ComponentType) -> bytes:
    if len(payload) > MAX_VARIABLE_LENGTH:
        raise OversizeValueError(
            f"{ctype.name} payload too long: {len(payload)} bytes "
            f"(max {MAX_VARIABLE_LENGTH})")
    return LENGTH_STRUCT.pack(len(payload)) + payload


# ─── Deserialization ────────────────────────────────────────────────────────

def payload_bounds(data, offset: int, ctype: int) -> Tuple[int, int]:
    """
    Locate the payload of the component whose tag sits at ``offset``.
    Returns (payload_start, payload_end). Raises DecodeError for unknown
    tags or if the component runs past the end of the buffer.
    """
    size = FIXED_SIZES.get(ctype)
    if size is not None:
        start = offset + 1
    elif ctype in VARIABLE_TYPES:
        if offset + 1 + LENGTH_PREFIX_SIZE > len(data):
            raise DecodeError(
                f"Truncated length prefix for {ComponentType(ctype).name} at offset {offset}")
        size = LENGTH_STRUCT.unpack_from(data, offset + 1)[0]
        start = offset + 1 + LENGTH_PREFIX_SIZE
    else:
        raise DecodeError(f"Unknown component type 0x{ctype:02X} at offset {offset}")

    end = start + size
    if end > len(data):
        raise DecodeError(
            f"Truncated {ComponentType(ctype).name} component at offset {offset}: "
            f"needs {size} bytes, {len(data) - start} available")
    return start, end


def deserialize_component(data, offset: int) -> Tuple[Component, int]:
    """
    Deserialize the component record at ``offset``.
    Returns (Component, new_offset).
    """
    ctype = data[offset]
    start, end = payload_bounds(data, offset, ctype)

    if ctype == ComponentType.BOOL:
        val: Any = data[start] != 0

    elif ctype == ComponentType.LONG:
        val = LONG_STRUCT.unpack_from(data, start)[0]

    elif ctype == ComponentType.DOUBLE:
        val = DOUBLE_STRUCT.unpack_from(data, start)[0]

    elif ctype == ComponentType.TIME_UUID or ctype == ComponentType.LEXICAL_UUID:
        val = uuid.UUID(bytes=bytes(data[start:end]))

    elif ctype == ComponentType.ASCII:
        val = _decode_text(data[start:end], "ascii", offset)

    elif ctype == ComponentType.UTF8:
        val = _decode_text(data[start:end], "utf-8", offset)

    elif ctype == ComponentType.BYTES:
        val = bytes(data[start:end])

    elif is_placeholder(ctype):
        val = placeholder_for(ctype)

    else:
        # STOP is a terminator, not a component
        raise DecodeError(f"Unexpected STOP marker at offset {offset}")

    return Component(ComponentType(ctype), val), end


def _decode_text(raw, encoding: str, offset: int) -> str:
    try:
        return bytes(raw).decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeError(
            f"Invalid {encoding} text in component at offset {offset}: {e.reason}") from e

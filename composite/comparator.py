"""
Composite Key Comparator
========================
Orders two encoded composite buffers component by component, walking
both in lockstep without decoding the whole sequence. This is the
storage engine's hot path, so fixed-length payloads are compared straight
out of the buffers.

Ordering rules:
  - An empty (or None) buffer sorts below any non-empty buffer.
  - Components with different tags order by tag value, except that a
    finished composite (STOP) sorts above a trailing MATCH_MINIMUM.
  - Components with the same tag order by the per-type rule below.
  - The end of a buffer reads as STOP, so a prefix sorts below any
    longer composite unless the continuation is MATCH_MINIMUM.

Per-type rules:
  BOOL          False < True
  LONG          signed 64-bit
  DOUBLE        numeric, -0.0 == 0.0, NaN above every number
  BYTES, ASCII  unsigned bytewise, shorter first on a common prefix
  UTF8          decoded text in UTF-16 code unit order (not raw byte order)
  LEXICAL_UUID  most- then least-significant 64 bits, as signed longs
  TIME_UUID     60-bit timestamp, then unsigned bytewise
"""

import math
import struct
from functools import cmp_to_key

from composite.decoder import validate
from composite.errors import DecodeError
from composite.types import (
    ComponentType, DOUBLE_STRUCT, HEADER_SIZE, LONG_STRUCT,
    is_registered, payload_bounds,
)

_STOP = ComponentType.STOP
_MINIMUM = ComponentType.MATCH_MINIMUM

# time_low(I) time_mid(H) time_hi_and_version(H)
UUID_TIME_STRUCT = struct.Struct(">IHH")
# most significant bits(q) least significant bits(q)
UUID_HALVES_STRUCT = struct.Struct(">qq")


def _sign(x, y) -> int:
    return (x > y) - (x < y)


# ─── Per-type rules ─────────────────────────────────────────────────────────
# Each rule takes (buf_a, start_a, end_a, buf_b, start_b, end_b) payload spans.

def _compare_bool(a, sa, ea, b, sb, eb) -> int:
    return (a[sa] != 0) - (b[sb] != 0)


def _compare_long(a, sa, ea, b, sb, eb) -> int:
    return _sign(LONG_STRUCT.unpack_from(a, sa)[0], LONG_STRUCT.unpack_from(b, sb)[0])


def compare_doubles(x: float, y: float) -> int:
    """Numeric order with NaN sorted above every number (and equal to NaN)."""
    if x < y:
        return -1
    if x > y:
        return 1
    x_nan = math.isnan(x)
    y_nan = math.isnan(y)
    return x_nan - y_nan


def _compare_double(a, sa, ea, b, sb, eb) -> int:
    return compare_doubles(DOUBLE_STRUCT.unpack_from(a, sa)[0],
                           DOUBLE_STRUCT.unpack_from(b, sb)[0])


def _compare_raw(a, sa, ea, b, sb, eb) -> int:
    return _sign(a[sa:ea], b[sb:eb])


def _compare_utf8(a, sa, ea, b, sb, eb) -> int:
    try:
        x = a[sa:ea].decode("utf-8")
        y = b[sb:eb].decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid utf-8 text in UTF8 component: {e.reason}") from e
    # UTF-16 code unit order: surrogate pairs sort below U+E000..U+FFFF
    return _sign(x.encode("utf-16-be"), y.encode("utf-16-be"))


def _compare_lexical_uuid(a, sa, ea, b, sb, eb) -> int:
    return _sign(UUID_HALVES_STRUCT.unpack_from(a, sa),
                 UUID_HALVES_STRUCT.unpack_from(b, sb))


def uuid_timestamp(data, offset: int = 0) -> int:
    """
    Extract the 60-bit timestamp of a version-1 UUID stored at ``offset``.
    The wire layout is time_low(32) time_mid(16) version(4)+time_hi(12);
    chronological order is time_hi, time_mid, time_low.
    """
    low, mid, hi = UUID_TIME_STRUCT.unpack_from(data, offset)
    return ((hi & 0x0FFF) << 48) | (mid << 32) | low


def _compare_time_uuid(a, sa, ea, b, sb, eb) -> int:
    d = _sign(uuid_timestamp(a, sa), uuid_timestamp(b, sb))
    if d != 0:
        return d
    return _compare_raw(a, sa, ea, b, sb, eb)


def _compare_placeholder(a, sa, ea, b, sb, eb) -> int:
    return 0


_RULES = {
    ComponentType.BOOL: _compare_bool,
    ComponentType.LONG: _compare_long,
    ComponentType.DOUBLE: _compare_double,
    ComponentType.TIME_UUID: _compare_time_uuid,
    ComponentType.LEXICAL_UUID: _compare_lexical_uuid,
    ComponentType.ASCII: _compare_raw,
    ComponentType.UTF8: _compare_utf8,
    ComponentType.BYTES: _compare_raw,
    ComponentType.MATCH_MINIMUM: _compare_placeholder,
    ComponentType.MATCH_MAXIMUM: _compare_placeholder,
}


# ─── Streaming compare ──────────────────────────────────────────────────────

def _as_bytes(data):
    if data is None:
        return b""
    if isinstance(data, memoryview):
        return data.tobytes()
    return data


def _check_tag(tag: int, offset: int) -> None:
    if not is_registered(tag):
        raise DecodeError(f"Unknown component type 0x{tag:02X} at offset {offset}")


def compare(a, b) -> int:
    """
    Compare two encoded composites. Returns -1, 0 or 1.
    Raises ValidationError on a bad header and DecodeError on a malformed
    component.
    """
    a = _as_bytes(a)
    b = _as_bytes(b)
    len_a = len(a)
    len_b = len(b)
    if len_a == 0:
        return 0 if len_b == 0 else -1
    if len_b == 0:
        return 1

    validate(a)
    validate(b)

    pos_a = HEADER_SIZE
    pos_b = HEADER_SIZE
    while True:
        tag_a = a[pos_a] if pos_a < len_a else _STOP
        tag_b = b[pos_b] if pos_b < len_b else _STOP

        if tag_a != tag_b:
            if tag_a == _STOP and tag_b == _MINIMUM:
                return 1
            if tag_b == _STOP and tag_a == _MINIMUM:
                return -1
            _check_tag(tag_a, pos_a)
            _check_tag(tag_b, pos_b)
            return -1 if tag_a < tag_b else 1

        if tag_a == _STOP:
            return 0

        start_a, end_a = payload_bounds(a, pos_a, tag_a)
        start_b, end_b = payload_bounds(b, pos_b, tag_b)
        comp = _RULES[tag_a](a, start_a, end_a, b, start_b, end_b)
        if comp != 0:
            return comp

        pos_a = end_a
        pos_b = end_b


sort_key = cmp_to_key(compare)

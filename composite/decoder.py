"""
Composite Key Decoder
=====================
Header validation and lazy decoding of frozen composite buffers.

An empty (or None) buffer is valid and decodes to an empty sequence; it
is how range scans express "no bound". Any non-empty buffer must start
with the exact magic and version, otherwise it is rejected.

Decoding is forward-only: each call starts a fresh cursor after the
header and stops at the STOP marker or the end of the buffer. Bytes after
the STOP marker are ignored.
"""

import logging
from typing import Any, Iterator, List

from composite.errors import ValidationError
from composite.types import (
    Component, ComponentType, FORMAT_VERSION, HEADER_SIZE, MAGIC,
    deserialize_component,
)

logger = logging.getLogger(__name__)


def _buffer(data):
    return b"" if data is None else data


# ─── Validation ─────────────────────────────────────────────────────────────

def validate(data) -> None:
    """
    Check the header of a composite buffer.
    Raises ValidationError on a short header, bad magic or wrong version.
    """
    data = _buffer(data)
    if len(data) == 0:
        return

    if len(data) < HEADER_SIZE:
        logger.debug("Rejected %d-byte buffer: shorter than header", len(data))
        raise ValidationError(
            f"Not a composite key: {len(data)} bytes is shorter than the "
            f"{HEADER_SIZE}-byte header")

    for i, expected in enumerate(MAGIC):
        if data[i] != expected:
            logger.debug("Rejected buffer: magic byte %d is 0x%02X", i, data[i])
            raise ValidationError(f"Not a composite key (magic byte {i} incorrect)")

    version = data[len(MAGIC)]
    if version != FORMAT_VERSION:
        logger.debug("Rejected buffer: format version %d", version)
        raise ValidationError(
            f"Incorrect composite key version, expected {FORMAT_VERSION}, "
            f"found {version}")


def is_valid(data) -> bool:
    """Non-raising variant of validate()."""
    try:
        validate(data)
    except ValidationError:
        return False
    return True


# ─── Iteration ──────────────────────────────────────────────────────────────

def iter_components(data) -> Iterator[Component]:
    """
    Validate the header, then lazily yield Component(type, value) pairs.
    Raises DecodeError (while iterating) on unknown tags or truncation.
    """
    data = _buffer(data)
    validate(data)
    return _walk(data)


def _walk(data) -> Iterator[Component]:
    if len(data) == 0:
        return
    offset = HEADER_SIZE
    end = len(data)
    while offset < end and data[offset] != ComponentType.STOP:
        component, offset = deserialize_component(data, offset)
        yield component


def iterate(data) -> Iterator[Any]:
    """Lazily yield the decoded values of a composite buffer."""
    return (component.value for component in iter_components(data))


def decode(data) -> List[Any]:
    """Fully decode a composite buffer into a list of values."""
    return list(iterate(data))


# ─── Rendering ──────────────────────────────────────────────────────────────

def render_value(value: Any) -> str:
    """Textual form of one value. Byte strings render as lowercase hex."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


def render(data) -> str:
    """Render every decoded value, comma separated."""
    return ",".join(render_value(v) for v in iterate(data))

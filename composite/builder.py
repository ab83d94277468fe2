"""
Composite Key Builder
=====================
Incremental construction of composite keys.

A CompositeBuilder buffers appended components in a growable bytearray
and materializes the final byte string on freeze(). Freezing appends the
STOP marker exactly once and is idempotent; after it the builder rejects
further appends. A builder with no components freezes to b"" (no bound).

Usage:
    key = CompositeBuilder().append("smith").append("bob").append(1000).freeze()
    key = encode("smith", "bob", 1000)
    low, high = encode("smith", MATCH_MINIMUM), encode("smith", MATCH_MAXIMUM)

Composite is the frozen, immutable form: hashable, comparable with the
streaming comparator, iterable over its decoded values.

Concurrency: a builder is single-owner. Frozen bytes and Composite
instances are immutable and safe to share.
"""

import logging
import uuid
from typing import Any, Iterable, Iterator, List, Optional

from composite.comparator import compare
from composite.config import CodecConfig, get_config
from composite.decoder import decode, iter_components, iterate, render, validate
from composite.errors import FrozenCompositeError, PlaceholderOrderError
from composite.types import (
    Component, ComponentType, HEADER, HEADER_SIZE, STOP_MARKER,
    classify, is_placeholder, serialize_component,
)

logger = logging.getLogger(__name__)


class CompositeBuilder:
    """
    Mutable, append-only composite key under construction.

    Plain values are classified by type: bool, int (LONG), float (DOUBLE),
    uuid.UUID (TIME_UUID for version 1, else LEXICAL_UUID), str (UTF8 by
    default, see CodecConfig.string_type), bytes-like (BYTES) and the
    MATCH_MINIMUM / MATCH_MAXIMUM placeholders. Lists and tuples are
    flattened. A Component(type, value) pair forces a specific tag.

    Every append method returns the builder for chaining.
    """

    def __init__(self, *values: Any, config: Optional[CodecConfig] = None):
        self._config = config if config is not None else get_config()
        self._buffer = bytearray()
        self._frozen: Optional[bytes] = None
        self._count = 0
        self._after_placeholder = False
        self._warned = False
        self.extend(values)

    # ─── Generic appends ────────────────────────────────────────────────

    def append(self, value: Any) -> "CompositeBuilder":
        """Append one value, classifying it by its Python type."""
        if isinstance(value, Component):
            return self._append_component(classify(value), value.value)
        if isinstance(value, (list, tuple)):
            return self.extend(value)
        ctype = classify(value, self._config.string_type)
        return self._append_component(ctype, value)

    def extend(self, values: Iterable[Any]) -> "CompositeBuilder":
        for value in values:
            self.append(value)
        return self

    # ─── Typed appends ──────────────────────────────────────────────────

    def append_bool(self, value: bool) -> "CompositeBuilder":
        return self._append_component(ComponentType.BOOL, value)

    def append_long(self, value: int) -> "CompositeBuilder":
        return self._append_component(ComponentType.LONG, value)

    def append_double(self, value: float) -> "CompositeBuilder":
        return self._append_component(ComponentType.DOUBLE, value)

    def append_time_uuid(self, value: uuid.UUID) -> "CompositeBuilder":
        return self._append_component(ComponentType.TIME_UUID, value)

    def append_lexical_uuid(self, value: uuid.UUID) -> "CompositeBuilder":
        return self._append_component(ComponentType.LEXICAL_UUID, value)

    def append_ascii(self, value: str) -> "CompositeBuilder":
        return self._append_component(ComponentType.ASCII, value)

    def append_utf8(self, value: str) -> "CompositeBuilder":
        return self._append_component(ComponentType.UTF8, value)

    def append_bytes(self, value: bytes) -> "CompositeBuilder":
        return self._append_component(ComponentType.BYTES, value)

    def append_match_minimum(self) -> "CompositeBuilder":
        """Append MATCH_MINIMUM. Must be the last append before freeze()."""
        return self._append_component(ComponentType.MATCH_MINIMUM)

    def append_match_maximum(self) -> "CompositeBuilder":
        """Append MATCH_MAXIMUM. Must be the last append before freeze()."""
        return self._append_component(ComponentType.MATCH_MAXIMUM)

    def _append_component(self, ctype: ComponentType, value: Any = None) -> "CompositeBuilder":
        if self._frozen is not None:
            raise FrozenCompositeError("Cannot append to a frozen composite")
        if self._after_placeholder:
            self._check_placeholder_order(ctype)

        # Serialize first so a rejected value leaves the buffer untouched
        record = serialize_component(ctype, value)
        if not self._buffer:
            self._buffer.extend(HEADER)
        self._buffer.extend(record)
        self._count += 1
        self._after_placeholder = is_placeholder(ctype)
        return self

    def _check_placeholder_order(self, ctype: ComponentType) -> None:
        if self._config.strict_placeholders:
            raise PlaceholderOrderError(
                f"{ctype.name} component appended after a placeholder; "
                f"placeholders must be the last component")
        if not self._warned:
            self._warned = True
            logger.warning(
                "%s component appended after a placeholder; ordering past a "
                "non-terminal placeholder is undefined", ctype.name)

    # ─── Freezing ───────────────────────────────────────────────────────

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def freeze(self) -> bytes:
        """Return the encoded bytes, appending the STOP marker on first call."""
        if self._frozen is None:
            if self._buffer:
                self._buffer.extend(STOP_MARKER)
            self._frozen = bytes(self._buffer)
            self._buffer = bytearray()
            logger.debug("Froze composite: %d components, %d bytes",
                         self._count, len(self._frozen))
        return self._frozen

    def composite(self) -> "Composite":
        """Freeze and wrap the result in an immutable Composite."""
        return Composite._trusted(self.freeze())

    def values(self) -> List[Any]:
        return decode(self.freeze())

    def __iter__(self) -> Iterator[Any]:
        return iterate(self.freeze())

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        state = "frozen" if self.frozen else "open"
        return f"CompositeBuilder({self._count} components, {state})"


class Composite:
    """
    An immutable, encoded composite key.

    Equality and hashing use the frozen bytes; ordering uses the streaming
    comparator. The two can disagree: keys holding -0.0 and 0.0, or keys
    with different bytes after STOP, are both <= and >= each other yet
    not ==. Do not dedupe a sorted() list with ==; use compare() == 0.
    str() renders the values comma separated.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[bytes] = b""):
        data = b"" if data is None else bytes(data)
        validate(data)
        self._data = data

    @classmethod
    def _trusted(cls, data: bytes) -> "Composite":
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    @classmethod
    def of(cls, *values: Any, config: Optional[CodecConfig] = None) -> "Composite":
        """Build a Composite from values in one call."""
        return CompositeBuilder(*values, config=config).composite()

    @property
    def data(self) -> bytes:
        return self._data

    def __bytes__(self) -> bytes:
        return self._data

    def components(self) -> List[Component]:
        return list(iter_components(self._data))

    def values(self) -> List[Any]:
        return decode(self._data)

    def __iter__(self) -> Iterator[Any]:
        return iterate(self._data)

    def __len__(self) -> int:
        return sum(1 for _ in iter_components(self._data))

    def __bool__(self) -> bool:
        return len(self._data) > HEADER_SIZE and self._data[HEADER_SIZE] != ComponentType.STOP

    def __contains__(self, value: object) -> bool:
        return any(v == value for v in self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Composite):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __lt__(self, other: "Composite") -> bool:
        if not isinstance(other, Composite):
            return NotImplemented
        return compare(self._data, other._data) < 0

    def __le__(self, other: "Composite") -> bool:
        if not isinstance(other, Composite):
            return NotImplemented
        return compare(self._data, other._data) <= 0

    def __gt__(self, other: "Composite") -> bool:
        if not isinstance(other, Composite):
            return NotImplemented
        return compare(self._data, other._data) > 0

    def __ge__(self, other: "Composite") -> bool:
        if not isinstance(other, Composite):
            return NotImplemented
        return compare(self._data, other._data) >= 0

    def __str__(self) -> str:
        return render(self._data)

    def __repr__(self) -> str:
        return f"Composite({', '.join(repr(v) for v in self)})"


def encode(*values: Any, config: Optional[CodecConfig] = None) -> bytes:
    """Encode values (lists and tuples are flattened) into composite bytes."""
    return CompositeBuilder(*values, config=config).freeze()

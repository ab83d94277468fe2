"""
Composite Keys
==============
A self-describing, totally ordered binary encoding for multi-part keys
(e.g. lastname, firstname, timestamp). Comparing two encoded keys with
compare() reproduces the type-aware order of their components, field by
field, left to right.

Usage:
    from composite import encode, decode, compare, MATCH_MINIMUM, MATCH_MAXIMUM

    key = encode("smith", "bob", 1000)
    decode(key)                          # ['smith', 'bob', 1000]
    compare(key, encode("hello", 256))   # 1
    start, finish = prefix_range("smith")
"""

from composite.errors import (
    CompositeError, ValidationError, DecodeError, UnsupportedValueError,
    OversizeValueError, FrozenCompositeError, PlaceholderOrderError,
)
from composite.types import (
    ComponentType, Component, MAGIC, FORMAT_VERSION, HEADER, HEADER_SIZE,
    type_from_string,
)
from composite.placeholders import Placeholder, MATCH_MINIMUM, MATCH_MAXIMUM
from composite.config import CodecConfig, get_config
from composite.decoder import validate, is_valid, iterate, iter_components, decode, render
from composite.comparator import compare, sort_key, uuid_timestamp
from composite.builder import CompositeBuilder, Composite, encode
from composite.bounds import prefix_range, in_range, scan, iter_prefix

__version__ = "1.0.0"

__all__ = [
    "CompositeError", "ValidationError", "DecodeError", "UnsupportedValueError",
    "OversizeValueError", "FrozenCompositeError", "PlaceholderOrderError",
    "ComponentType", "Component", "MAGIC", "FORMAT_VERSION", "HEADER", "HEADER_SIZE",
    "type_from_string",
    "Placeholder", "MATCH_MINIMUM", "MATCH_MAXIMUM",
    "CodecConfig", "get_config",
    "validate", "is_valid", "iterate", "iter_components", "decode", "render",
    "compare", "sort_key", "uuid_timestamp",
    "CompositeBuilder", "Composite", "encode",
    "prefix_range", "in_range", "scan", "iter_prefix",
]

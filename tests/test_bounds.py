"""
Composite Key Range Bound Tests
===============================
  ✔ prefix bounds enclose exactly the keys with that prefix
  ✔ inclusive / exclusive / open-ended bounds
  ✔ in-memory scan order
"""

import os
import sys

import pytest

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from composite.bounds import in_range, iter_prefix, prefix_range, scan
from composite.builder import encode
from composite.decoder import decode
from composite.placeholders import MATCH_MAXIMUM, MATCH_MINIMUM


@pytest.fixture
def people():
    """Keys of (lastname, firstname, timestamp)."""
    return [
        encode("smith", "bob", 1000),
        encode("hello", 256),
        encode("smith", "alice", 3000),
        encode("smithers", "waylon", 1),
        encode("smith"),
        encode("jones", "bob", 5),
        encode("smith", "bob", 999),
        encode("smit", "x", 0),
    ]


# ═══════════════════════════════════════════════════════════════════
# Prefix bounds
# ═══════════════════════════════════════════════════════════════════

class TestPrefixRange:

    def test_bounds_use_placeholders(self):
        start, finish = prefix_range("smith")
        assert start == encode("smith", MATCH_MINIMUM)
        assert finish == encode("smith", MATCH_MAXIMUM)

    def test_prefix_scan(self, people):
        start, finish = prefix_range("smith")
        result = [decode(k) for k in scan(people, start, finish)]
        assert result == [
            ["smith"],
            ["smith", "alice", 3000],
            ["smith", "bob", 999],
            ["smith", "bob", 1000],
        ]

    def test_two_component_prefix(self, people):
        result = [decode(k) for k in iter_prefix(people, "smith", "bob")]
        assert result == [["smith", "bob", 999], ["smith", "bob", 1000]]

    def test_no_match(self, people):
        assert list(iter_prefix(people, "zed")) == []

    def test_empty_prefix_matches_everything(self, people):
        assert len(list(iter_prefix(people))) == len(people)


# ═══════════════════════════════════════════════════════════════════
# Bound checks and scans
# ═══════════════════════════════════════════════════════════════════

class TestInRange:

    def test_open_bounds(self):
        assert in_range(encode(1))
        assert in_range(encode(1), b"", b"")
        assert in_range(encode(1), None, encode(2))
        assert in_range(encode(3), encode(2), None)

    def test_inclusive(self):
        assert in_range(encode(2), encode(2), encode(5))
        assert in_range(encode(5), encode(2), encode(5))

    def test_exclusive(self):
        assert not in_range(encode(2), encode(2), encode(5), inclusive=False)
        assert not in_range(encode(5), encode(2), encode(5), inclusive=False)
        assert in_range(encode(3), encode(2), encode(5), inclusive=False)

    def test_outside(self):
        assert not in_range(encode(1), encode(2), encode(5))
        assert not in_range(encode(6), encode(2), encode(5))


class TestScan:

    def test_order(self):
        keys = [encode(n) for n in (5, -3, 12, 0, 7)]
        assert [decode(k)[0] for k in scan(keys)] == [-3, 0, 5, 7, 12]

    def test_reverse(self):
        keys = [encode(n) for n in (5, -3, 12)]
        assert [decode(k)[0] for k in scan(keys, reverse=True)] == [12, 5, -3]

    def test_bounded(self):
        keys = [encode(n) for n in range(10)]
        assert [decode(k)[0] for k in scan(keys, encode(3), encode(6))] == [3, 4, 5, 6]
        assert [decode(k)[0] for k in scan(keys, encode(3), encode(6), inclusive=False)] == [4, 5]

"""
Composite Key Range Bounds
==========================
Helpers for building and applying range-scan bounds with placeholders.

A store that orders keys with compare() can fetch every key starting
with a prefix X by scanning from encode(X, MATCH_MINIMUM) to
encode(X, MATCH_MAXIMUM). An empty bound (b"") leaves that side open.
"""

from typing import Any, Iterable, Iterator, List, Optional, Tuple

from composite.builder import encode
from composite.comparator import compare, sort_key
from composite.config import CodecConfig
from composite.placeholders import MATCH_MAXIMUM, MATCH_MINIMUM


def prefix_range(*prefix: Any, config: Optional[CodecConfig] = None) -> Tuple[bytes, bytes]:
    """
    Return (start, finish) bounds that enclose every key beginning with
    the prefix components. Both bounds are exclusive of real keys; the bare
    prefix key itself falls inside them.
    """
    start = encode(*prefix, MATCH_MINIMUM, config=config)
    finish = encode(*prefix, MATCH_MAXIMUM, config=config)
    return start, finish


def in_range(key: bytes, start: Optional[bytes] = None, finish: Optional[bytes] = None,
             inclusive: bool = True) -> bool:
    """
    Check whether key lies between start and finish.
    An empty or None bound is unbounded on that side.
    """
    if start:
        c = compare(key, start)
        if c < 0 or (c == 0 and not inclusive):
            return False
    if finish:
        c = compare(key, finish)
        if c > 0 or (c == 0 and not inclusive):
            return False
    return True


def scan(keys: Iterable[bytes], start: Optional[bytes] = None,
         finish: Optional[bytes] = None, inclusive: bool = True,
         reverse: bool = False) -> List[bytes]:
    """
    Select the keys inside [start, finish] and return them in comparator
    order (descending if reverse). An in-memory stand-in for a store's
    range scan.
    """
    selected = [k for k in keys if in_range(k, start, finish, inclusive)]
    selected.sort(key=sort_key, reverse=reverse)
    return selected


def iter_prefix(keys: Iterable[bytes], *prefix: Any,
                config: Optional[CodecConfig] = None) -> Iterator[bytes]:
    """Yield, in order, the keys that begin with the prefix components."""
    start, finish = prefix_range(*prefix, config=config)
    yield from scan(keys, start, finish)

"""
Composite Key Placeholders
==========================
Two sentinel components used only as the last component of a composite to
build half-open range-scan bounds:

  MATCH_MINIMUM  sorts below every real component (tag 1)
  MATCH_MAXIMUM  sorts above every real component (tag 255)

So for any prefix X:

  encode(X, MATCH_MINIMUM) < encode(X) < encode(X, anything) < encode(X, MATCH_MAXIMUM)

Placeholders are not stored values. They carry no payload, and ordering
past a non-terminal placeholder is undefined.
"""

# Tag values mirror ComponentType.MATCH_MINIMUM / MATCH_MAXIMUM in types.py.
_MINIMUM_TAG = 0x01
_MAXIMUM_TAG = 0xFF


class Placeholder:
    """A payload-free sentinel component, identified by its type tag."""

    __slots__ = ("tag", "name")

    def __init__(self, tag: int, name: str):
        self.tag = tag
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Placeholder):
            return NotImplemented
        return self.tag == other.tag

    def __hash__(self) -> int:
        return hash((Placeholder, self.tag))

    def __repr__(self) -> str:
        return self.name

    __str__ = __repr__

    def __reduce__(self):
        # Unpickle to the module-level singleton
        return self.name


MATCH_MINIMUM = Placeholder(_MINIMUM_TAG, "MATCH_MINIMUM")
MATCH_MAXIMUM = Placeholder(_MAXIMUM_TAG, "MATCH_MAXIMUM")

PLACEHOLDERS = {p.tag: p for p in (MATCH_MINIMUM, MATCH_MAXIMUM)}


def placeholder_for(tag: int) -> Placeholder:
    """Return the singleton placeholder for a tag. Raises KeyError if none."""
    return PLACEHOLDERS[tag]

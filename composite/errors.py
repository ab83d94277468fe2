"""
Composite Key Errors
====================
Typed failures raised by the codec. None of them are retried internally;
a buffer either fully validates/decodes or the operation fails.

Each error also derives from the builtin category it belongs to, so
callers may catch either ``DecodeError`` or a plain ``ValueError``.
"""


class CompositeError(Exception):
    """Base class for all composite key errors."""
    pass


class ValidationError(CompositeError, ValueError):
    """Raised when a non-empty buffer has a bad header (magic or version)."""
    pass


class DecodeError(CompositeError, ValueError):
    """Raised on an unrecognized type tag or a truncated component."""
    pass


class UnsupportedValueError(CompositeError, TypeError):
    """Raised when a value has no registered component encoding."""
    pass


class OversizeValueError(CompositeError, ValueError):
    """Raised when a value does not fit its field (16-bit length, 64-bit long)."""
    pass


class FrozenCompositeError(CompositeError, RuntimeError):
    """Raised when appending to a builder that has already been frozen."""
    pass


class PlaceholderOrderError(CompositeError, ValueError):
    """Raised in strict mode when a component follows a placeholder."""
    pass

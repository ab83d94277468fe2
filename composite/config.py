"""
Configuration for the composite key codec.

All configuration is done via environment variables, read once per process.
Builders accept an explicit ``config=`` to override the process defaults.

Settings:
    COMPOSITE_STRING_TYPE          utf8 | ascii (default utf8): tag used for
                                   plain ``str`` values
    COMPOSITE_STRICT_PLACEHOLDERS  true | false (default false): reject any
                                   component appended after a placeholder
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from composite.types import ComponentType, type_from_string

logger = logging.getLogger(__name__)

_STRING_TYPES = (ComponentType.UTF8, ComponentType.ASCII)
_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


@dataclass(frozen=True)
class CodecConfig:
    """Codec configuration.

    Attributes:
        string_type: Component type for plain ``str`` values (UTF8 or ASCII)
        strict_placeholders: Raise instead of warn when a component follows
            a placeholder
    """

    string_type: ComponentType = ComponentType.UTF8
    strict_placeholders: bool = False

    def __post_init__(self) -> None:
        if self.string_type not in _STRING_TYPES:
            raise ValueError(
                f"string_type must be UTF8 or ASCII, got {self.string_type!r}")

    @classmethod
    def from_env(cls) -> CodecConfig:
        """Load configuration from environment variables."""
        config = cls(
            string_type=type_from_string(os.getenv("COMPOSITE_STRING_TYPE", "utf8")),
            strict_placeholders=_parse_bool(
                "COMPOSITE_STRICT_PLACEHOLDERS",
                os.getenv("COMPOSITE_STRICT_PLACEHOLDERS", "false"),
            ),
        )
        logger.debug(
            "Loaded codec config: string_type=%s strict_placeholders=%s",
            config.string_type.name,
            config.strict_placeholders,
        )
        return config


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")


@lru_cache(maxsize=1)
def get_config() -> CodecConfig:
    """Return the process-wide configuration, loading it on first use."""
    return CodecConfig.from_env()

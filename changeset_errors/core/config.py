"""Normalizer configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

DEFAULT_SEPARATOR = "."
INVALID_NODE_RAISE = "raise"
INVALID_NODE_STRINGIFY = "stringify"
INVALID_NODE_POLICIES = (INVALID_NODE_RAISE, INVALID_NODE_STRINGIFY)


@dataclass(frozen=True)
class NormalizerSettings:
    """Settings controlling how raw error trees are flattened."""

    separator: str = DEFAULT_SEPARATOR
    invalid_node_policy: str = INVALID_NODE_RAISE
    escape_separator: bool = False

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("separator must be a non-empty string")
        if self.invalid_node_policy not in INVALID_NODE_POLICIES:
            raise ValueError(
                f"invalid_node_policy must be one of {', '.join(INVALID_NODE_POLICIES)}; "
                f"got {self.invalid_node_policy!r}"
            )

    def safe_for_logging(self) -> dict[str, str | bool]:
        """Return normalizer settings as a plain dict for logs."""
        return {
            "separator": self.separator,
            "invalid_node_policy": self.invalid_node_policy,
            "escape_separator": self.escape_separator,
        }


@lru_cache(maxsize=1)
def get_default_settings() -> NormalizerSettings:
    """Return the shared default settings."""
    return NormalizerSettings()

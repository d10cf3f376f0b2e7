"""Error taxonomy for mirror runs.

Every failure the mirror can encounter maps onto one of the classes
below, so callers can decide which ones are fatal for them. The CLI
treats all of them as fatal; the self-update phase tolerates
`TransferError` for individual installers.
"""

from __future__ import annotations

__all__ = [
    "MirrorError",
    "TransferError",
    "ParseError",
    "SchemaError",
    "IntegrityError",
    "ConfigError",
]


class MirrorError(RuntimeError):
    """Base exception for every mirror failure."""


class TransferError(MirrorError):
    """Raised when fetching a file from upstream fails."""


class ParseError(MirrorError):
    """Raised when a manifest is not a well-formed TOML document."""


class SchemaError(MirrorError):
    """Raised when a manifest parses but does not have the expected shape or version."""


class IntegrityError(MirrorError):
    """Raised when a digest disagrees with the value declared upstream."""


class ConfigError(MirrorError):
    """Raised when the mirror configuration is invalid."""

"""Classification of channels, artifact names and target triples."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

ROLLING_CHANNEL_NAME: Final[str] = "nightly"
WILDCARD_TARGET: Final[str] = "*"

_NAME_SEPARATORS = re.compile(r"[-.]")


class ChannelKind(str, Enum):
    """Whether a channel is rebuilt frequently or pinned to releases."""

    ROLLING = "rolling"
    PINNED = "pinned"


def classify_artifact(file_name: str) -> ChannelKind:
    """
    Return the kind of channel an artifact file belongs to.

    The file name is split into `-`/`.` separated tokens and only a whole
    token equal to `nightly` makes it rolling, so a package or target name
    that merely contains the substring is never misclassified:

        rust-std-nightly-x86_64-unknown-linux-gnu.tar.xz -> ROLLING
        rust-std-1.78.0-x86_64-unknown-linux-gnu.tar.xz -> PINNED
    """
    if ROLLING_CHANNEL_NAME in _NAME_SEPARATORS.split(file_name):
        return ChannelKind.ROLLING
    return ChannelKind.PINNED


class TargetFamily(str, Enum):
    """Operating system family of a target triple, as far as installers care."""

    WINDOWS = "windows"
    OTHER = "other"


@dataclass(frozen=True, kw_only=True)
class TargetTriple:
    """A parsed `arch-vendor-os[-env]` target triple."""

    raw: str
    arch: str
    components: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str) -> TargetTriple:
        """Split a target triple into its architecture and remaining components."""
        arch, *rest = raw.split("-")
        return cls(raw=raw, arch=arch, components=tuple(rest))

    @property
    def family(self) -> TargetFamily:
        if "windows" in self.components:
            return TargetFamily.WINDOWS
        return TargetFamily.OTHER

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.family is TargetFamily.WINDOWS else ""

"""
Loading and serializing rustup release manifests.

A channel manifest (`dist/channel-rust-<channel>.toml`) looks like:

    manifest-version = "2"
    date = "2024-05-02"

    [pkg.rustc]
    version = "1.78.0 (9b00956e5 2024-04-29)"

    [pkg.rustc.target.x86_64-unknown-linux-gnu]
    available = true
    url = "https://static.rust-lang.org/dist/2024-05-02/rustc-1.78.0-x86_64-unknown-linux-gnu.tar.gz"
    hash = "0b8b...e1"
    xz_url = "https://static.rust-lang.org/dist/2024-05-02/rustc-1.78.0-x86_64-unknown-linux-gnu.tar.xz"
    xz_hash = "7f1c...9a"

The document is kept as parsed so that tables and keys we do not
understand (renames, profiles, components, ...) survive a rewrite
untouched. Typed views are built on demand for the parts we act on.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from typing import Any, Final

import tomli_w
from dacite import DaciteError, from_dict

from .errors import ParseError, SchemaError

MANIFEST_VERSION: Final[str] = "2"
SELF_UPDATE_SCHEMA_VERSION: Final[str] = "1"


@dataclass(frozen=True, kw_only=True)
class ArtifactVariant:
    """One of the downloadable forms of a target entry."""

    name: str
    url_key: str
    hash_key: str


PLAIN: Final = ArtifactVariant(name="plain", url_key="url", hash_key="hash")
COMPRESSED: Final = ArtifactVariant(name="xz", url_key="xz_url", hash_key="xz_hash")
VARIANTS: Final[tuple[ArtifactVariant, ...]] = (PLAIN, COMPRESSED)


@dataclass(frozen=True, kw_only=True)
class TargetEntry:
    """Typed view of a `[pkg.<name>.target.<triple>]` table."""

    available: bool
    url: str | None = None
    hash: str | None = None
    xz_url: str | None = None
    xz_hash: str | None = None

    def artifact(self, variant: ArtifactVariant) -> tuple[str, str]:
        """Return the (url, hash) pair for the given variant."""
        url = getattr(self, variant.url_key)
        sha256 = getattr(self, variant.hash_key)
        if url is None or sha256 is None:
            raise SchemaError(
                f"available target is missing `{variant.url_key}` or `{variant.hash_key}`"
            )
        return url, sha256


@dataclass(frozen=True, kw_only=True)
class TargetSlot:
    """A target table inside a manifest, addressable for in-place rewrites."""

    package: str
    target: str
    table: dict[str, Any]

    def entry(self) -> TargetEntry:
        try:
            return from_dict(TargetEntry, self.table)
        except DaciteError as exc:
            raise SchemaError(f"invalid target entry {self}: {exc}") from exc

    @property
    def available(self) -> bool:
        return self.entry().available

    def disable(self) -> None:
        """Mark the target unavailable while keeping every other key as is."""
        self.table["available"] = False

    def set_url(self, variant: ArtifactVariant, url: str) -> None:
        self.table[variant.url_key] = url

    def __str__(self) -> str:
        return f"{self.package}/{self.target}"


@dataclass(kw_only=True)
class ChannelManifest:
    """A parsed channel manifest."""

    document: dict[str, Any]

    @property
    def version(self) -> str:
        return self.document["manifest-version"]

    @property
    def date(self) -> str:
        """Release date as written in the manifest (YYYY-MM-DD)."""
        return self.document["date"]

    def targets(self) -> Iterator[TargetSlot]:
        """Yield every (package, target) table in document order."""
        for package, pkg_table in self.document["pkg"].items():
            for target, table in pkg_table["target"].items():
                yield TargetSlot(package=package, target=target, table=table)


@dataclass(frozen=True, kw_only=True)
class SelfUpdateManifest:
    """The `rustup/release-stable.toml` manifest."""

    schema_version: str
    version: str


def _parse_toml(data: bytes, *, what: str) -> dict[str, Any]:
    try:
        return tomllib.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ParseError(f"cannot parse {what}: {exc}") from exc


def load_channel_manifest(data: bytes) -> ChannelManifest:
    """
    Parse a channel manifest.

    Raises:
        ParseError: if data is not valid UTF-8 TOML.
        SchemaError: if the manifest version is not supported or the
            document does not have the pkg/target structure.
    """
    document = _parse_toml(data, what="channel manifest")

    version = document.get("manifest-version")
    if version != MANIFEST_VERSION:
        raise SchemaError(
            f"unsupported manifest-version: {version!r} (only {MANIFEST_VERSION!r} supported)"
        )

    release_date = document.get("date")
    if not isinstance(release_date, str):
        raise SchemaError(f"manifest date must be a string, got: {release_date!r}")
    try:
        date.fromisoformat(release_date)
    except ValueError as exc:
        raise SchemaError(f"invalid manifest date: {release_date}") from exc

    packages = document.get("pkg")
    if not isinstance(packages, dict):
        raise SchemaError("manifest has no [pkg] table")
    for name, pkg_table in packages.items():
        targets = pkg_table.get("target") if isinstance(pkg_table, dict) else None
        if not isinstance(targets, dict):
            raise SchemaError(f"package {name} has no target table")
        for target, table in targets.items():
            if not isinstance(table, dict):
                raise SchemaError(f"package {name} target {target} is not a table")

    return ChannelManifest(document=document)


def serialize_channel_manifest(manifest: ChannelManifest) -> bytes:
    """
    Serialize a channel manifest.

    The output is a pure function of the parsed document: serializing
    the same document twice yields identical bytes.
    """
    return tomli_w.dumps(manifest.document).encode("utf-8")


def load_self_update_manifest(data: bytes) -> SelfUpdateManifest:
    """
    Parse the self-update manifest.

    Raises:
        ParseError: if data is not valid UTF-8 TOML.
        SchemaError: if the schema version is not supported or the
            version field is missing.
    """
    document = _parse_toml(data, what="self-update manifest")
    schema_version = document.get("schema-version")
    if schema_version != SELF_UPDATE_SCHEMA_VERSION:
        raise SchemaError(
            f"unsupported schema-version: {schema_version!r} "
            f"(only {SELF_UPDATE_SCHEMA_VERSION!r} supported)"
        )
    version = document.get("version")
    if not isinstance(version, str) or not version or "/" in version or version in (".", ".."):
        raise SchemaError(f"self-update manifest has an invalid version: {version!r}")
    return SelfUpdateManifest(schema_version=schema_version, version=version)

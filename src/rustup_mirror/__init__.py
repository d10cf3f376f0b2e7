"""rustup mirror library.

This library mirrors rustup release channels (manifests plus their
artifacts) into a local tree served under a different base URL, and
reclaims the space used by artifacts no manifest points to anymore.
"""

from importlib.metadata import PackageNotFoundError, version

from .channel import ChannelSyncOrchestrator, ChannelSyncResult
from .config import MirrorConfig, load_config
from .errors import (
    ConfigError,
    IntegrityError,
    MirrorError,
    ParseError,
    SchemaError,
    TransferError,
)
from .gc import CollectionReport, RetentionGarbageCollector, RetentionPolicy
from .mirror import MirrorReport, collect_garbage, sync_mirror
from .planner import ArtifactSyncPlanner
from .references import ReferenceSet, ReferenceSnapshot
from .selfupdate import SelfUpdateSyncOrchestrator
from .transport import UpstreamClient

try:
    __version__ = version("rustup-mirror")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "ArtifactSyncPlanner",
    "ChannelSyncOrchestrator",
    "ChannelSyncResult",
    "CollectionReport",
    "ConfigError",
    "IntegrityError",
    "MirrorConfig",
    "MirrorError",
    "MirrorReport",
    "ParseError",
    "ReferenceSet",
    "ReferenceSnapshot",
    "RetentionGarbageCollector",
    "RetentionPolicy",
    "SchemaError",
    "SelfUpdateSyncOrchestrator",
    "TransferError",
    "UpstreamClient",
    "collect_garbage",
    "load_config",
    "sync_mirror",
    "__version__",
]

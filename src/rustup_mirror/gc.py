"""
Garbage collection of artifacts no longer referenced by any manifest.

The collector walks `<mirror>/dist/<YYYY-MM-DD>/` directories. For each
file (sidecars excepted, they follow their subject):

- referenced by the current run: kept;
- unreferenced, nightly artifact: removed only once its directory date
  is older than the retention cutoff, kept otherwise;
- unreferenced, any other artifact: removed.

A directory left with no kept file is removed entirely. Files directly
under `dist/` (the canonical manifests) are never touched.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path

from .classify import ChannelKind, classify_artifact
from .planner import SIDECAR_SUFFIX, sidecar_path
from .references import ReferenceSnapshot

log = logging.getLogger("rustup_mirror/gc")

DATE_DIR_FORMAT = "%Y-%m-%d"


def parse_date_dir(name: str) -> date | None:
    """Return the date a `YYYY-MM-DD` directory name stands for, or None."""
    try:
        return datetime.strptime(name, DATE_DIR_FORMAT).date()
    except ValueError:
        return None


@dataclass(frozen=True, kw_only=True)
class RetentionPolicy:
    """
    Age-based retention of rolling-channel artifacts.

    Without a cutoff, unreferenced rolling-channel artifacts are never
    deleted because of their age.
    """

    cutoff: date | None = None

    @classmethod
    def from_days(cls, days: int | None, *, today: date | None = None) -> RetentionPolicy:
        """Build a policy keeping `days` days of rolling-channel artifacts."""
        if days is None:
            return cls()
        if days < 0:
            raise ValueError(f"retention days must be >= 0, got {days}")
        today = today if today is not None else date.today()
        return cls(cutoff=today - timedelta(days=days))

    def rolling_expired(self, day: date) -> bool:
        """Return whether rolling artifacts dated `day` are past retention."""
        return self.cutoff is not None and day < self.cutoff


@dataclass(kw_only=True)
class CollectionReport:
    """What a collection pass did."""

    deleted_files: list[Path] = field(default_factory=list)
    deleted_dirs: list[Path] = field(default_factory=list)
    kept_files: int = 0


class RetentionGarbageCollector:
    """Delete unreferenced artifacts under a `dist` directory."""

    def __init__(
        self,
        *,
        dist_dir: Path,
        references: ReferenceSnapshot,
        policy: RetentionPolicy,
    ) -> None:
        self.dist_dir = dist_dir
        self.references = references
        self.policy = policy

    def collect(self) -> CollectionReport:
        """Run one collection pass. Running it again right after is a no-op."""
        report = CollectionReport()
        if not self.dist_dir.is_dir():
            log.info("nothing to collect: %s does not exist", self.dist_dir)
            return report
        if self.policy.cutoff is not None:
            log.info("nightly artifacts before %s will be deleted", self.policy.cutoff)
        for entry in sorted(self.dist_dir.iterdir()):
            if not entry.is_dir():
                continue
            day = parse_date_dir(entry.name)
            if day is None:
                log.debug("skipping non-dated directory %s", entry)
                continue
            self._collect_dir(entry, day, report)
        log.info(
            "garbage collection... ok (deleted_files=%d deleted_dirs=%d kept=%d)",
            len(report.deleted_files),
            len(report.deleted_dirs),
            report.kept_files,
        )
        return report

    def _collect_dir(self, directory: Path, day: date, report: CollectionReport) -> None:
        rolling_expired = self.policy.rolling_expired(day)
        kept = 0
        for path in sorted(p for p in directory.rglob("*") if p.is_file()):
            if path.name.endswith(SIDECAR_SUFFIX):
                continue
            if path in self.references:
                kept += 1
                continue
            kind = classify_artifact(path.name)
            if kind is ChannelKind.ROLLING and not rolling_expired:
                log.debug("keeping unreferenced %s until its retention expires", path)
                kept += 1
                continue
            self._delete_file(path, report)

        report.kept_files += kept
        if kept == 0:
            log.info("removing directory %s", directory)
            shutil.rmtree(directory)
            report.deleted_dirs.append(directory)

    def _delete_file(self, path: Path, report: CollectionReport) -> None:
        log.info("removing %s", path)
        path.unlink()
        report.deleted_files.append(path)
        try:
            sidecar_path(path).unlink(missing_ok=True)
        except OSError as exc:
            log.warning("cannot remove %s: %s", sidecar_path(path), exc)

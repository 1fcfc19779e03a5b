# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import time
from pathlib import Path
from typing import Callable, List, Set
from pydantic import BaseModel, Field
from ..core.config import Config
from ..core.models import referenced_urls
from ..infrastructure.db.repository import CatalogRepository
from ..infrastructure.storage.asset_store import AssetStore
from .deletion_service import DeletionReconciler


class DanglingReference(BaseModel):
    entry_id: int
    url: str


class AuditReport(BaseModel):
    entries: int = 0
    dangling: List[DanglingReference] = Field(default_factory=list)
    orphans: List[Path] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.dangling and not self.orphans


class AuditService:
    """
    Compares the catalog with the files in the upload buckets.

    Dangling: an entry references a file that is not on disk.
    Orphan: a file on disk that no entry references. Files younger than
    `orphan_grace_seconds` are ignored, they may belong to a create that has
    not saved the catalog yet.
    """

    def __init__(
        self,
        config: Config,
        repo: CatalogRepository,
        asset_store: AssetStore,
        reconciler: DeletionReconciler,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.repo = repo
        self.asset_store = asset_store
        self.reconciler = reconciler
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def audit(self) -> AuditReport:
        entries = self.repo.load_all()
        referenced: Set[Path] = set()
        dangling = []

        for entry in entries:
            for url in referenced_urls(entry):
                path = self.reconciler.resolve(url)
                if path is None:
                    continue
                referenced.add(path)
                if not path.is_file():
                    dangling.append(DanglingReference(entry_id=entry.id, url=url))

        cutoff = self.clock() - self.config.orphan_grace_seconds
        orphans = []
        for path in self.asset_store.iter_files():
            if path.resolve() in referenced:
                continue
            try:
                mtime = path.stat().st_mtime
            except FileNotFoundError:
                continue
            if mtime <= cutoff:
                orphans.append(path)

        return AuditReport(entries=len(entries), dangling=dangling, orphans=orphans)

    def prune_orphans(self) -> List[Path]:
        removed = []
        for path in self.audit().orphans:
            try:
                path.unlink(missing_ok=True)
                removed.append(path)
            except OSError as e:
                self.logger.warning(f"Failed to remove orphan {path}: {e}")

        if removed:
            self.logger.info(f"Removed {len(removed)} orphaned asset(s)")
        return removed

    def run_scheduled(self):
        """Scheduler entry point; only reports."""
        try:
            report = self.audit()
        except Exception as e:
            self.logger.error(f"Asset audit failed: {e}")
            return

        if report.clean:
            self.logger.info(f"Asset audit: {report.entries} entries, no problems found.")
            return
        for ref in report.dangling:
            self.logger.warning(f"Asset audit: entry {ref.entry_id} references missing file {ref.url}")
        if report.orphans:
            self.logger.warning(
                f"Asset audit: {len(report.orphans)} orphaned file(s) under {self.asset_store.uploads_dir}"
            )

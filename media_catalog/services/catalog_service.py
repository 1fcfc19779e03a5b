# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import threading
from enum import Enum
from typing import Iterable, List, Mapping, Optional
from pydantic import BaseModel
from ..core.builder import ItemBuilder
from ..core.config import Config
from ..core.exceptions import (
    CatalogError,
    CatalogWriteError,
    CorruptCatalogError,
    UploadTooLargeError,
)
from ..core.models import EntryBase, StoredAsset, UploadedPart, referenced_urls
from ..infrastructure.db.repository import CatalogRepository
from ..infrastructure.storage.asset_store import AssetStore
from .deletion_service import DeletionReconciler

logger = logging.getLogger(__name__)


class OperationStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    FAILED = "failed"


class OperationResult(BaseModel):
    status: OperationStatus
    item: Optional[EntryBase] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.OK


class CatalogService:
    """
    Create / list / delete operations over the catalog.

    Every read-modify-write of the catalog document runs under one lock, so
    overlapping requests in this process cannot drop each other's changes.
    Failures never escape: they are returned as an OperationResult.
    """

    def __init__(
        self,
        config: Config,
        repo: CatalogRepository,
        asset_store: AssetStore,
        builder: ItemBuilder,
        reconciler: DeletionReconciler,
    ):
        self.config = config
        self.repo = repo
        self.asset_store = asset_store
        self.builder = builder
        self.reconciler = reconciler
        self._lock = threading.Lock()

    def list_entries(self) -> List[EntryBase]:
        return self.repo.load_all()

    def get_entry(self, entry_id: int) -> Optional[EntryBase]:
        return self.repo.find(entry_id)

    def create_entry(self, fields: Mapping[str, Optional[str]], parts: Iterable[UploadedPart]) -> OperationResult:
        stored: List[StoredAsset] = []
        try:
            stored = self.asset_store.store_all(parts)
            entry = self.builder.build(fields, stored)
            self._discard_unreferenced(entry, stored)

            with self._lock:
                entries = self._load_for_update()
                entries.append(entry)
                if not self.repo.save_all(entries):
                    raise CatalogWriteError(f"Could not save catalog {self.repo.catalog_file.path}")
        except UploadTooLargeError as e:
            logger.warning(f"Rejected upload for '{fields.get('title')}': {e}")
            return OperationResult(status=OperationStatus.REJECTED, error=str(e))
        except CatalogError as e:
            self.asset_store.discard(stored)
            logger.error(f"Failed to create entry '{fields.get('title')}': {e}")
            return OperationResult(status=OperationStatus.FAILED, error=str(e))
        except Exception as e:
            self.asset_store.discard(stored)
            logger.exception(f"Unexpected error creating entry '{fields.get('title')}'")
            return OperationResult(status=OperationStatus.FAILED, error=str(e))

        logger.info(
            f"[User Action] Created {entry.type} '{entry.title}' (id={entry.id}, {len(stored)} file(s))"
        )
        return OperationResult(status=OperationStatus.OK, item=entry)

    def delete_entry(self, entry_id: int) -> OperationResult:
        try:
            with self._lock:
                entries = self._load_for_update()
                matches = [e for e in entries if e.id == entry_id]
                if not matches:
                    return OperationResult(status=OperationStatus.NOT_FOUND, error=f"Entry {entry_id} not found")

                remaining = [e for e in entries if e.id != entry_id]
                keep = self.reconciler.referenced_paths(remaining)
                removed = []
                for entry in matches:
                    removed.extend(self.reconciler.remove_assets(entry, keep))

                if not self.repo.save_all(remaining):
                    raise CatalogWriteError(f"Could not save catalog {self.repo.catalog_file.path}")
        except CatalogError as e:
            logger.error(f"Failed to delete entry {entry_id}: {e}")
            return OperationResult(status=OperationStatus.FAILED, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error deleting entry {entry_id}")
            return OperationResult(status=OperationStatus.FAILED, error=str(e))

        logger.info(f"[User Action] Deleted entry {entry_id} ('{matches[0].title}'), removed {len(removed)} file(s)")
        return OperationResult(status=OperationStatus.OK, item=matches[0])

    def _load_for_update(self) -> List[EntryBase]:
        try:
            return self.repo.load_all(strict=True)
        except CorruptCatalogError as e:
            if self.config.strict_catalog:
                raise
            backup = self.repo.quarantine()
            logger.error(f"{e}. Moved it to {backup} and starting from an empty catalog.")
            return []

    def _discard_unreferenced(self, entry: EntryBase, stored: List[StoredAsset]):
        kept = set(referenced_urls(entry))
        unused = [asset for asset in stored if asset.url not in kept]
        if unused:
            names = ", ".join(asset.field_name for asset in unused)
            logger.info(f"Discarding upload(s) not used by {entry.type} entry {entry.id}: {names}")
            self.asset_store.discard(unused)

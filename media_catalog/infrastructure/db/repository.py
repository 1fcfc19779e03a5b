# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import List, Optional, Sequence
from ...core.exceptions import CatalogReadError, CorruptCatalogError
from ...core.models import EntryBase, catalog_adapter, entries_to_list
from .database import CatalogFile

logger = logging.getLogger(__name__)


class CatalogRepository:
    def __init__(self, catalog_file: CatalogFile):
        self.catalog_file = catalog_file

    def load_all(self, strict: bool = False) -> List[EntryBase]:
        """
        Reads every entry from the catalog document.

        A missing document is an empty catalog. An unreadable or corrupt one
        is logged and treated as empty, unless `strict` is set, in which case
        CatalogReadError / CorruptCatalogError is raised.
        """
        if not self.catalog_file.exists():
            return []

        try:
            raw = self.catalog_file.read()
        except ValueError as e:
            return self._unreadable(CorruptCatalogError(f"Catalog {self.catalog_file.path} is not valid JSON: {e}"), strict)
        except OSError as e:
            return self._unreadable(CatalogReadError(f"Catalog {self.catalog_file.path} could not be read: {e}"), strict)

        try:
            return catalog_adapter.validate_python(raw)
        except ValueError as e:
            return self._unreadable(CorruptCatalogError(f"Catalog {self.catalog_file.path} has invalid entries: {e}"), strict)

    def save_all(self, entries: Sequence[EntryBase]) -> bool:
        """
        Replaces the catalog document. Returns False instead of raising.
        """
        try:
            self.catalog_file.write(entries_to_list(entries))
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save catalog {self.catalog_file.path}: {e}")
            return False

    def find(self, entry_id: int) -> Optional[EntryBase]:
        for entry in self.load_all():
            if entry.id == entry_id:
                return entry
        return None

    def quarantine(self) -> Optional[Path]:
        return self.catalog_file.quarantine()

    @staticmethod
    def _unreadable(error: CatalogReadError, strict: bool) -> List[EntryBase]:
        if strict:
            raise error
        logger.error(str(error))
        return []

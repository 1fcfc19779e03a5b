# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional, Set
from ..core.exceptions import AssetRemovalError
from ..core.models import EntryBase, referenced_urls

logger = logging.getLogger(__name__)


class DeletionReconciler:
    """
    Removes the asset files owned by a catalog entry.
    Only references under the uploads prefix that resolve inside the uploads
    directory are ever passed to the filesystem.
    """

    def __init__(self, uploads_dir: Path, url_prefix: str = "/uploads"):
        self.uploads_dir = Path(uploads_dir)
        self.url_prefix = "/" + url_prefix.strip("/")

    def resolve(self, url: str) -> Optional[Path]:
        if not url or not url.startswith(self.url_prefix + "/"):
            return None

        root = self.uploads_dir.resolve()
        candidate = (root / url[len(self.url_prefix) + 1:]).resolve()
        if candidate == root or not candidate.is_relative_to(root):
            return None
        return candidate

    def asset_paths(self, entry: EntryBase) -> List[Path]:
        paths = []
        for url in referenced_urls(entry):
            path = self.resolve(url)
            if path is None:
                logger.warning(f"Not removing reference outside {self.uploads_dir}: {url}")
                continue
            paths.append(path)
        return paths

    def referenced_paths(self, entries: Iterable[EntryBase]) -> Set[Path]:
        paths = set()
        for entry in entries:
            for url in referenced_urls(entry):
                path = self.resolve(url)
                if path is not None:
                    paths.add(path)
        return paths

    def remove_assets(self, entry: EntryBase, keep: AbstractSet[Path] = frozenset()) -> List[Path]:
        """
        Deletes every asset of `entry` except the paths in `keep`. Missing
        files are skipped; other failures are collected and raised together
        once all paths were tried.
        """
        removed = []
        failures = []
        for path in self.asset_paths(entry):
            if path in keep:
                logger.info(f"Keeping {path}, still referenced by another entry")
                continue
            if path.is_dir():
                logger.warning(f"Not removing directory referenced by entry {entry.id}: {path}")
                continue
            try:
                path.unlink()
                removed.append(path)
            except FileNotFoundError:
                logger.debug(f"Asset already gone: {path}")
            except OSError as e:
                failures.append((path, e))

        if failures:
            raise AssetRemovalError(failures)
        return removed

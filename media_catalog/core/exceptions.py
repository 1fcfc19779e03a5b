# Copyright (c) 2025 Trae AI. All rights reserved.


class CatalogError(Exception):
    """Base class for catalog and asset errors."""


class StorageWriteError(CatalogError):
    """An uploaded asset could not be written to disk."""


class UploadTooLargeError(StorageWriteError):
    def __init__(self, filename: str, limit: int):
        self.filename = filename
        self.limit = limit
        super().__init__(f"Upload '{filename}' exceeds the size limit of {limit} bytes")


class CatalogReadError(CatalogError):
    """The catalog document could not be read."""


class CorruptCatalogError(CatalogReadError):
    """The catalog document exists but does not hold a valid entry list."""


class CatalogWriteError(CatalogError):
    """The catalog document could not be persisted."""


class AssetRemovalError(CatalogError):
    def __init__(self, failures):
        self.failures = failures
        details = "; ".join(f"{path.name}: {err}" for path, err in failures)
        super().__init__(f"Failed to remove {len(failures)} asset(s): {details}")

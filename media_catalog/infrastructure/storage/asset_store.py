# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional
from ...core.exceptions import StorageWriteError, UploadTooLargeError
from ...core.models import Bucket, StoredAsset, UploadedPart
from ...core.roles import parse_role

logger = logging.getLogger(__name__)

EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]{1,16}")


class AssetStore:
    """
    Writes uploaded parts into the image or video bucket under a generated,
    collision-free name.
    """

    CHUNK_SIZE = 1024 * 1024
    MAX_NAME_ATTEMPTS = 16

    def __init__(
        self,
        uploads_dir: Path,
        url_prefix: str = "/uploads",
        max_upload_bytes: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.uploads_dir = Path(uploads_dir)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_upload_bytes = max_upload_bytes
        self.clock = clock

    def bucket_dir(self, bucket: Bucket) -> Path:
        return self.uploads_dir / bucket.value

    def ensure_buckets(self):
        for bucket in Bucket:
            self.bucket_dir(bucket).mkdir(parents=True, exist_ok=True)

    def url_for(self, bucket: Bucket, name: str) -> str:
        return f"{self.url_prefix}/{bucket.value}/{name}"

    def store(self, part: UploadedPart) -> Optional[StoredAsset]:
        """
        Writes a single part. Returns None for parts without a recognized role.
        """
        role = parse_role(part.field_name)
        if role is None:
            logger.debug(f"Ignoring upload field '{part.field_name}' ({part.filename})")
            return None

        target_dir = self.bucket_dir(role.bucket)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path, handle = self._create_unique(target_dir, part.filename)
        except OSError as e:
            raise StorageWriteError(f"Could not write '{part.filename}': {e}") from e

        size = 0
        try:
            with handle:
                while True:
                    chunk = part.stream.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if self.max_upload_bytes is not None and size > self.max_upload_bytes:
                        raise UploadTooLargeError(part.filename, self.max_upload_bytes)
                    handle.write(chunk)
        except UploadTooLargeError:
            self._remove_quietly(path)
            raise
        except OSError as e:
            self._remove_quietly(path)
            raise StorageWriteError(f"Could not write '{part.filename}': {e}") from e

        return StoredAsset(
            role=role,
            field_name=part.field_name,
            original_filename=part.filename,
            path=path,
            url=self.url_for(role.bucket, path.name),
            size=size,
        )

    def store_all(self, parts: Iterable[UploadedPart]) -> List[StoredAsset]:
        """
        Writes every part. If one fails, the files already written by this
        call are removed before the error is re-raised.
        """
        stored: List[StoredAsset] = []
        try:
            for part in parts:
                asset = self.store(part)
                if asset is not None:
                    stored.append(asset)
        except StorageWriteError:
            self.discard(stored)
            raise
        return stored

    def discard(self, assets: Iterable[StoredAsset]):
        for asset in assets:
            self._remove_quietly(asset.path)

    def iter_files(self) -> Iterator[Path]:
        for bucket in Bucket:
            directory = self.bucket_dir(bucket)
            if not directory.exists():
                continue
            for path in sorted(directory.iterdir()):
                if path.is_file():
                    yield path

    def _create_unique(self, directory: Path, filename: str):
        for _ in range(self.MAX_NAME_ATTEMPTS):
            path = directory / self._generate_name(filename)
            try:
                return path, open(path, "xb")
            except FileExistsError:
                continue
        raise StorageWriteError(f"Could not allocate a unique name for '{filename}'")

    def _generate_name(self, filename: str) -> str:
        suffix = Path(filename or "").suffix
        if not EXTENSION_PATTERN.fullmatch(suffix):
            suffix = ""
        return f"{int(self.clock() * 1000)}-{secrets.randbelow(10**9 + 1)}{suffix}"

    @staticmethod
    def _remove_quietly(path: Path):
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")

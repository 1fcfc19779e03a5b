# Copyright (c) 2025 Trae AI. All rights reserved.

import io
import pytest
import yaml
from pathlib import Path
from media_catalog.core.builder import ItemBuilder
from media_catalog.core.config import Config
from media_catalog.core.models import StoredAsset, UploadedPart
from media_catalog.core.roles import parse_role
from media_catalog.infrastructure.db.database import CatalogFile
from media_catalog.infrastructure.db.repository import CatalogRepository
from media_catalog.infrastructure.storage.asset_store import AssetStore
from media_catalog.services.catalog_service import CatalogService
from media_catalog.services.deletion_service import DeletionReconciler


@pytest.fixture
def config(tmp_path):
    return Config(
        uploads_dir=tmp_path / "uploads",
        data_file=tmp_path / "data" / "movies.json",
        public_dir=tmp_path / "public",
        orphan_grace_seconds=0,
    )

@pytest.fixture
def catalog_file(config):
    return CatalogFile(config.data_file)

@pytest.fixture
def catalog_repo(catalog_file):
    return CatalogRepository(catalog_file)

@pytest.fixture
def asset_store(config):
    store = AssetStore(config.uploads_dir, config.uploads_url_prefix, config.max_upload_bytes)
    store.ensure_buckets()
    return store

@pytest.fixture
def builder(config):
    return ItemBuilder(config.episode_title_template)

@pytest.fixture
def reconciler(config):
    return DeletionReconciler(config.uploads_dir, config.uploads_url_prefix)

@pytest.fixture
def catalog_service(config, catalog_repo, asset_store, builder, reconciler):
    return CatalogService(config, catalog_repo, asset_store, builder, reconciler)

@pytest.fixture
def make_part():
    def _make(field_name, filename, content=b"data"):
        return UploadedPart(field_name=field_name, filename=filename, stream=io.BytesIO(content))
    return _make

@pytest.fixture
def make_asset():
    def _make(field_name, url, path=Path("/nowhere")):
        return StoredAsset(
            role=parse_role(field_name),
            field_name=field_name,
            original_filename="upload.bin",
            path=path,
            url=url,
        )
    return _make

@pytest.fixture
def make_server(tmp_path):
    from media_catalog.server.app import Server

    def _make(**overrides):
        settings = {
            "uploads_dir": str(tmp_path / "uploads"),
            "data_file": str(tmp_path / "data" / "movies.json"),
            "public_dir": str(tmp_path / "public"),
            "orphan_grace_seconds": 0,
        }
        settings.update(overrides)
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump(settings), encoding="utf-8")

        server = Server(str(config_path))
        server.app.config["TESTING"] = True
        return server
    return _make

@pytest.fixture
def server(make_server):
    return make_server()

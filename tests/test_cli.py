# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import yaml
from typer.testing import CliRunner
from media_catalog.cli.main import app
from media_catalog.core.models import MovieEntry

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path, config):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config.model_dump(mode="json")), encoding="utf-8")
    return str(path)

def test_list_shows_entries(config_path, catalog_service):
    catalog_service.create_entry({"title": "Inception", "category": "Sci-Fi"}, [])

    result = runner.invoke(app, ["list", "--config-path", config_path])

    assert result.exit_code == 0
    assert "Inception" in result.output
    assert "1 entries" in result.output

def test_delete_command(config_path, catalog_service, catalog_repo, make_part):
    entry = catalog_service.create_entry({"title": "Gone"}, [make_part("video", "v.mp4")]).item

    result = runner.invoke(app, ["delete", str(entry.id), "--config-path", config_path])

    assert result.exit_code == 0
    assert catalog_repo.load_all() == []

def test_delete_unknown_entry_exits_with_error(config_path):
    result = runner.invoke(app, ["delete", "42", "--config-path", config_path])

    assert result.exit_code == 1
    assert "not found" in result.output

def test_audit_prune(config_path, catalog_repo, asset_store, make_part):
    stray = asset_store.store(make_part("image", "stray.jpg"))
    catalog_repo.save_all([MovieEntry(id=1, title="Missing", video_url="/uploads/movies/none.mp4")])

    result = runner.invoke(app, ["audit", "--config-path", config_path, "--prune"])

    assert result.exit_code == 0
    assert "Missing:" in result.output
    assert "Removed 1 orphaned file(s)" in result.output
    assert not stray.path.exists()

def test_audit_clean(config_path):
    result = runner.invoke(app, ["audit", "--config-path", config_path])

    assert result.exit_code == 0
    assert "no problems found" in result.output

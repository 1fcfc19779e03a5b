# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Config(BaseModel):
    uploads_dir: Path = Path("uploads")
    uploads_url_prefix: str = "/uploads"
    data_file: Path = Path("data/movies.json")
    public_dir: Path = Path("public")
    server_host: str = "0.0.0.0"
    server_port: int = 3000
    max_upload_bytes: int = 2000 * 1024 * 1024
    max_request_bytes: Optional[int] = None
    episode_title_template: str = "Episode {number}"
    strict_catalog: bool = False
    cors_origin: str = "*"
    audit_interval_minutes: int = 0
    orphan_grace_seconds: int = 3600
    verbose: bool = False

    @classmethod
    def load(cls, path: str = "config.yaml") -> "Config":
        config_file = Path(path)
        if not config_file.exists():
            logger.warning(f"Config file {config_file} not found, using defaults.")
            return cls()
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

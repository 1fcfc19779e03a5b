# Copyright (c) 2025 Trae AI. All rights reserved.

import json
import os
import time
from pathlib import Path
from typing import Any, Optional


class CatalogFile:
    """
    The JSON document holding the whole catalog.
    Writes replace the file in one step (temp file + os.replace).
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._init_dir()

    def _init_dir(self):
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, payload: Any):
        self._init_dir()
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def quarantine(self) -> Optional[Path]:
        """
        Moves the current document aside so a fresh one can be written.
        """
        if not self.path.exists():
            return None
        backup = self.path.with_name(f"{self.path.name}.corrupt-{int(time.time() * 1000)}")
        os.replace(self.path, backup)
        return backup

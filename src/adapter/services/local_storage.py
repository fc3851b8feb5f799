"""
Local Storage

Durable key/value slots on the local filesystem, one JSON document per key.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[Any]:
        """
        Read the JSON document stored under key.

        Raises:
            ValueError: the slot exists but does not hold valid JSON
        """
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r") as r_file:
            return json.load(r_file)

    def set_item(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w") as w_file:
            json.dump(value, w_file)
        # Readers never see a half-written slot
        os.replace(tmp_path, path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

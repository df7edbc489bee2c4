"""File-backed storage for the desktop shell's JSON documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from advisorbridge.utils.exceptions import StorageError
from advisorbridge.utils.helpers import ensure_dir

DEFAULT_DATA_FILE = "data.json"


class JsonFileStore:
    """Saves and loads whole JSON documents under one data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, filename: str) -> Path:
        name = Path(filename).name
        if not name or name != filename:
            raise StorageError(filename, "filename must not contain path separators")
        return self.data_dir / name

    def save(self, filename: str, data: Any) -> None:
        path = self.path_for(filename)
        try:
            content = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(filename, f"not JSON serializable: {exc}") from exc
        try:
            ensure_dir(self.data_dir)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise StorageError(filename, str(exc)) from exc

    def load(self, filename: str) -> Any | None:
        """Return the stored document, or None when the file does not exist."""
        path = self.path_for(filename)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(filename, str(exc)) from exc

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).exists()

    def delete(self, filename: str) -> None:
        path = self.path_for(filename)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(filename, str(exc)) from exc

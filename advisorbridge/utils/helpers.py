"""Small shared helpers."""

from __future__ import annotations

import time
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create the directory (and parents) when missing; return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the advisorbridge home directory (~/.advisorbridge)."""
    return ensure_dir(Path.home() / ".advisorbridge")


def now_ms() -> int:
    return int(time.time() * 1000)

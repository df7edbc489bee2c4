"""Process-local config cache shared by the CLI, the HTTP server and the desktop commands."""

from __future__ import annotations

import threading
from pathlib import Path

from loguru import logger

from advisorbridge.config.loader import get_config_path, load_config
from advisorbridge.config.schema import Config

_lock = threading.RLock()
_configs: dict[Path, Config] = {}


def _resolved(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Config for ``config_path`` (default ~/.advisorbridge/config.json), loaded once per path."""
    path = _resolved(config_path)
    with _lock:
        config = _configs.get(path)
        if config is None or force_reload:
            config = load_config(path)
            _configs[path] = config
            logger.debug("Loaded config from {} (file present: {})", path, path.exists())
        return config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Forget one cached path, or every path when none is given."""
    with _lock:
        if config_path is None:
            _configs.clear()
        else:
            _configs.pop(_resolved(config_path), None)

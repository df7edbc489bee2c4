"""Reading and writing ~/.advisorbridge/config.json.

The file uses camelCase keys (shared with the desktop shell's settings);
the pydantic models use snake_case.
"""

import json
import re
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from advisorbridge.config.schema import Config

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".advisorbridge" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, or defaults when the file does not exist.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Config built from the file. ADVISORBRIDGE_* environment variables
        still fill anything the file leaves unset.

    Raises:
        ValueError: the file is not JSON, is not an object, or fails validation.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config root must be a JSON object")
        return Config(**convert_keys(data))
    except (ValidationError, ValueError) as e:
        raise ValueError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to regenerate defaults."
        ) from e


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Write the config as camelCase JSON, creating the parent directory."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = convert_to_camel(config.model_dump())
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _rename_keys(data: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(data, dict):
        return {rename(k): _rename_keys(v, rename) for k, v in data.items()}
    if isinstance(data, list):
        return [_rename_keys(item, rename) for item in data]
    return data


def convert_keys(data: Any) -> Any:
    """camelCase keys -> snake_case, recursively."""
    return _rename_keys(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """snake_case keys -> camelCase, recursively."""
    return _rename_keys(data, snake_to_camel)


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)

"""Storage module for local JSON data."""

from advisorbridge.storage.json_store import DEFAULT_DATA_FILE, JsonFileStore

__all__ = ["DEFAULT_DATA_FILE", "JsonFileStore"]

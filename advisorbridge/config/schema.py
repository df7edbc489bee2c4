"""Configuration schema using Pydantic.

Defaults mirror the packaged desktop layout; the config file at
~/.advisorbridge/config.json and ADVISORBRIDGE_* environment variables
override them.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

ADVISOR_BINARY = "advisor.exe" if os.name == "nt" else "advisor"


class BridgeConfig(BaseModel):
    """Advisor process settings."""
    advisor_path: str = ""  # Explicit binary path; wins over lean_backend_path
    lean_backend_path: str = Field(
        default_factory=lambda: os.environ.get("LEAN_BACKEND_PATH") or "../lean-backend"
    )
    repl_flag: str = "--repl"
    trace_methods: list[str] = Field(default_factory=lambda: ["getWeeklyRecommendations"])


class ServerConfig(BaseModel):
    """HTTP front-end settings."""
    host: str = "0.0.0.0"
    port: int = Field(default_factory=lambda: int(os.environ.get("PORT") or 3001))


class StorageConfig(BaseModel):
    """Local JSON data file settings (desktop shell)."""
    data_dir: str = "~/.advisorbridge/data"
    data_file: str = "data.json"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_level: str = "DEBUG"


class Config(BaseSettings):
    """Root configuration for advisorbridge."""
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def resolve_advisor_path(self) -> Path:
        """Explicit advisor_path, else the lake build output under lean_backend_path."""
        if self.bridge.advisor_path.strip():
            return Path(self.bridge.advisor_path.strip()).expanduser()
        return (
            Path(self.bridge.lean_backend_path).expanduser()
            / ".lake"
            / "build"
            / "bin"
            / ADVISOR_BINARY
        )

    @property
    def data_dir_path(self) -> Path:
        return Path(self.storage.data_dir).expanduser()

    model_config = ConfigDict(
        env_prefix="ADVISORBRIDGE_",
        env_nested_delimiter="__",
    )

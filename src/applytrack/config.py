"""Configuration management for applytrack."""

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from applytrack.utils import setup_logging

DATA_DIR_NAME = ".applytrack"
CONFIG_FILE_NAME = "config.json"

# Deepest folder nesting the backend accepts below an application root
MAX_FOLDER_DEPTH = 10

Environment = Literal["test", "dev", "user"]


class ApplytrackConfig(BaseSettings):
    """Pydantic model for applytrack global configuration."""

    env: Environment = Field(default="dev", description="Environment name")

    api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the applications backend",
    )
    api_prefix: str = Field(
        default="/api",
        description="Path prefix every backend route is mounted under. Empty for none.",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for regular API requests",
        gt=0,
    )
    upload_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for multipart uploads",
        gt=0,
    )

    default_provider: str = Field(
        default="ollama",
        description="LLM provider name passed to chat and report requests",
    )
    pre_index_before_chat: bool = Field(
        default=True,
        description="Index listed documents that are not indexed yet before sending a chat message",
    )
    chat_history_limit: int = Field(
        default=50,
        description="Number of chat messages fetched when loading history",
        gt=0,
    )

    max_folder_depth: int = Field(
        default=MAX_FOLDER_DEPTH,
        description="Stop descending into folder hierarchies below this many levels",
        gt=0,
    )

    # overridden by ~/.applytrack/config.json
    log_level: str = "INFO"
    log_to_file: bool = Field(
        default=True,
        description="Write logs to ~/.applytrack/applytrack.log",
    )

    model_config = SettingsConfigDict(
        env_prefix="APPLYTRACK_",
        extra="ignore",
    )

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, value: str) -> str:
        value = value.strip().strip("/")
        return f"/{value}" if value else ""

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def base_url(self) -> str:
        """Full base URL used by the HTTP client, prefix included."""
        return f"{self.api_url}{self.api_prefix}"

    @property
    def is_test_env(self) -> bool:
        return self.env == "test"

    @property
    def data_dir_path(self) -> Path:
        """Get app state directory for config and logs."""
        if config_dir := os.getenv("APPLYTRACK_CONFIG_DIR"):
            return Path(config_dir)

        home = os.getenv("HOME", Path.home())
        return Path(home) / DATA_DIR_NAME


# Module-level cache for configuration
_CONFIG_CACHE: Optional[ApplytrackConfig] = None


class ConfigManager:
    """Manages applytrack configuration."""

    def __init__(self) -> None:
        home = os.getenv("HOME", Path.home())
        if isinstance(home, str):
            home = Path(home)

        # Allow override via environment variable
        if config_dir := os.getenv("APPLYTRACK_CONFIG_DIR"):
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = home / DATA_DIR_NAME

        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.config_dir.mkdir(parents=True, exist_ok=True)

    @property
    def config(self) -> ApplytrackConfig:
        """Get configuration, loading it lazily if needed."""
        return self.load_config()

    def load_config(self) -> ApplytrackConfig:
        """Load configuration from file or create default.

        Environment variables take precedence over file config values.
        Uses module-level cache across ConfigManager instances.
        """
        global _CONFIG_CACHE

        if _CONFIG_CACHE is not None:
            return _CONFIG_CACHE

        if not self.config_file.exists():
            config = ApplytrackConfig()
            self.save_config(config)
            return config

        try:
            file_data = json.loads(self.config_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:  # pragma: no cover
            logger.error(f"Invalid JSON in config file {self.config_file}: {e}")
            raise SystemExit(
                f"Error: config file is not valid JSON: {self.config_file}\n"
                f"  {e}\n"
                f"Fix or delete the file and re-run."
            )

        # File data is the base, env vars win for the fields they set
        env_dict = ApplytrackConfig().model_dump()
        merged_data: dict[str, Any] = dict(file_data)
        for field_name in ApplytrackConfig.model_fields.keys():
            if f"APPLYTRACK_{field_name.upper()}" in os.environ:
                merged_data[field_name] = env_dict[field_name]

        _CONFIG_CACHE = ApplytrackConfig(**merged_data)
        return _CONFIG_CACHE

    def save_config(self, config: ApplytrackConfig) -> None:
        """Save configuration to file and invalidate cache."""
        global _CONFIG_CACHE
        save_applytrack_config(self.config_file, config)
        _CONFIG_CACHE = None

    def set_value(self, name: str, value: Any) -> ApplytrackConfig:
        """Update a single config field and persist it.

        Raises:
            KeyError: If ``name`` is not a config field
        """
        if name not in ApplytrackConfig.model_fields:
            raise KeyError(name)

        data = self.load_config().model_dump()
        data[name] = value
        # Re-validate so a bad value never reaches the file
        config = ApplytrackConfig(**data)
        self.save_config(config)
        return config


def save_applytrack_config(file_path: Path, config: ApplytrackConfig) -> None:
    """Save configuration to file."""
    try:
        file_path.write_text(json.dumps(config.model_dump(mode="json"), indent=2))
    except Exception as e:  # pragma: no cover
        logger.error(f"Failed to save config: {e}")


def get_config() -> ApplytrackConfig:
    """Return the effective configuration for this process."""
    return ConfigManager().config


def init_cli_logging(config: Optional[ApplytrackConfig] = None) -> None:
    """Initialize logging for CLI commands - file only.

    CLI commands should not log to stdout to avoid interfering with
    command output. Level and file sink come from the effective config, so
    both config.json and APPLYTRACK_LOG_LEVEL / APPLYTRACK_LOG_TO_FILE apply.
    """
    config = config or get_config()
    setup_logging(
        log_level=config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.data_dir_path,
    )

"""
Reading settings from environment variables and the optional ccmcp.config.yaml,
and the pydantic models for MCP server definitions.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILENAME = "ccmcp.config.yaml"
USER_CONFIG_DIR = Path("~/.ccmcp")


class ServerDefinition(BaseModel):
    """
    Represents the configuration for an individual MCP server, as stored under
    `mcpServers` in the Claude Code configuration file.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )

    command: str | None = None
    """The command to execute the server (e.g. npx). Required unless `url` is set."""

    arguments: List[str] = Field(default_factory=list, alias="args")
    """The arguments for the server command."""

    environment: Dict[str, str] | None = Field(default=None, alias="env")
    """Environment variables to pass to the server process."""

    kind: str | None = Field(default=None, alias="type")
    """The transport type, e.g. "stdio"."""

    timeout_seconds: float | None = Field(default=None, alias="timeout")
    """Startup timeout for the server."""

    always_allow: List[str] | None = Field(default=None, alias="alwaysAllow")
    """Tools that may be called without confirmation."""

    url: str | None = None
    """The URL of a remote (http or sse) server."""

    headers: Dict[str, str] | None = None
    """HTTP headers sent to a remote server."""

    @model_validator(mode="after")
    def check_command_or_url(self) -> "ServerDefinition":
        if not self.command and not self.url:
            raise ValueError("a server needs either a 'command' or a 'url'")
        return self

    @property
    def target(self) -> str:
        """What the server runs or connects to, for display."""
        return self.command or self.url or ""

    def to_document(self) -> Dict[str, Any]:
        """The JSON object written to a store for this definition."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LoggerSettings(BaseModel):
    """
    Logger settings for the ccmcp application.
    """

    type: Literal["none", "console", "file"] = "none"

    level: Literal["debug", "info", "warning", "error"] = "warning"
    """Minimum logging level"""

    path: str = "~/.ccmcp/ccmcp.jsonl"
    """Path to log file, if logger 'type' is 'file'."""


class Settings(BaseSettings):
    """
    Settings class for the ccmcp application.
    """

    model_config = SettingsConfigDict(
        env_prefix="CCMCP_",
        env_nested_delimiter="__",
        extra="allow",
        nested_model_default_partial_update=True,
    )

    host_config_path: Path = Path("~/.claude.json")
    """Claude Code configuration file holding the active servers"""

    servers_key: str = "mcpServers"
    """Field of the host configuration that holds the active servers"""

    disabled_config_path: Path = USER_CONFIG_DIR / "disabled.json"
    """Document holding disabled servers"""

    journal_path: Path = USER_CONFIG_DIR / "journal.json"
    """Document recording moves between stores that have not completed"""

    logger: LoggerSettings = LoggerSettings()
    """Logger settings for the ccmcp application"""

    def resolved(self, path: Path) -> Path:
        return Path(os.path.expandvars(str(path))).expanduser()

    @classmethod
    def find_config(cls) -> Path | None:
        """Find the config file in the current directory, its parents, or ~/.ccmcp."""
        current_dir = Path.cwd().resolve()

        while current_dir != current_dir.parent:
            config_path = current_dir / CONFIG_FILENAME
            if config_path.exists():
                return config_path
            current_dir = current_dir.parent

        user_config = USER_CONFIG_DIR.expanduser() / CONFIG_FILENAME
        if user_config.exists():
            return user_config

        return None


# Global settings object
_settings: Settings | None = None


def resolve_env_vars(config_item: Any) -> Any:
    """Recursively resolve ${ENV_VAR} and ${ENV_VAR:default} in config data."""
    if isinstance(config_item, dict):
        return {k: resolve_env_vars(v) for k, v in config_item.items()}
    elif isinstance(config_item, list):
        return [resolve_env_vars(i) for i in config_item]
    elif isinstance(config_item, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_match(match: re.Match) -> str:
            var_name_with_default = match.group(1)
            if ":" in var_name_with_default:
                var_name, default_value = var_name_with_default.split(":", 1)
                return os.getenv(var_name, default_value)
            env_value = os.getenv(var_name_with_default)
            if env_value is None:
                # Leave the placeholder when unset and no default was given
                return match.group(0)
            return env_value

        return pattern.sub(replace_match, config_item)
    return config_item


def get_settings(config_path: str | None = None) -> Settings:
    """Get settings instance, automatically loading from config file if available."""
    global _settings

    # A specific config path always reloads, so each test gets its own config
    if config_path:
        _settings = None
    elif _settings:
        return _settings

    if config_path:
        config_file: Path | None = Path(config_path)
        if not config_file.is_absolute() and not config_file.exists():
            resolved_path = Path.cwd() / config_file.name
            if resolved_path.exists():
                config_file = resolved_path
    else:
        config_file = Settings.find_config()

    merged_settings = {}

    import yaml  # pylint: disable=C0415

    if config_file and config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_settings = yaml.safe_load(f) or {}
            merged_settings = resolve_env_vars(yaml_settings)
    elif config_file and not config_file.exists():
        print(f"Warning: Specified config file does not exist: {config_file}")

    _settings = Settings(**merged_settings)
    return _settings

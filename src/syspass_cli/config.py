"""
Configuration file support for syspass-cli.

Settings live in a JSON file, by default ~/.syspass/config.json. The file is
created with default values the first time the default location is used.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from syspass_cli.errors import ConfigError, ErrorCode, invalid_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".syspass"
CONFIG_FILE_NAME = "config.json"
USAGE_FILE_NAME = "usage.json"


class SyspassConfig(BaseModel):
    """Complete syspass-cli configuration."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    host: str = Field(default="", description="JSON-RPC endpoint, e.g. https://vault/api.php")
    token: str = Field(default="", description="API authorization token")
    password: str = Field(default="", description="Vault password; prompted once when empty")
    verify_host: bool = Field(default=True, description="Verify TLS certificates")
    api_version: str | None = Field(default=None, description="SyspassV3 (default) or SyspassV2")
    password_timeout: int | None = Field(default=None, ge=0, description="Seconds before clipboard is cleared")

    @classmethod
    def default(cls) -> "SyspassConfig":
        """Create config with all defaults."""
        return cls()

    @property
    def clipboard_timeout(self) -> int:
        """Clipboard clear delay in seconds, 0 disables clearing."""
        return 10 if self.password_timeout is None else self.password_timeout


def default_config_path() -> Path:
    """Path of the configuration file used when none is given."""
    return DEFAULT_CONFIG_DIR / CONFIG_FILE_NAME


def generate_default_config() -> str:
    """
    Generate default configuration file content.

    Returns:
        JSON string with default configuration
    """
    return SyspassConfig.default().model_dump_json(by_alias=True, indent=2) + "\n"


def save_default_config(path: Path | None = None) -> Path:
    """
    Save default configuration to file.

    Args:
        path: Path to save config (default: ~/.syspass/config.json)

    Returns:
        Path where config was saved
    """
    if path is None:
        path = default_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_default_config())
    logger.warning(f"Created default configuration at {path}")
    return path


def load_config(config_path: Path | str | None = None) -> SyspassConfig:
    """
    Load configuration from file.

    Args:
        config_path: Explicit path to config file (optional, ~ is expanded)

    Returns:
        SyspassConfig with loaded settings

    Raises:
        ConfigError: If config file cannot be read or is invalid
    """
    if config_path is None:
        config_path = default_config_path()
        if not config_path.exists():
            save_default_config(config_path)
    else:
        config_path = Path(config_path).expanduser()

    try:
        content = config_path.read_text()
    except OSError as e:
        raise ConfigError(
            message=f"Failed to read config file: {e}",
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            config_path=str(config_path),
        ) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise invalid_config(str(config_path), f"JSON does not have correct format: {e}") from e

    try:
        return SyspassConfig.model_validate(data)
    except ValidationError as e:
        raise invalid_config(str(config_path), str(e)) from e

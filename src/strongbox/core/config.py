# Core - Configuration
#
# config.json in the per-user config directory, created with defaults on
# first run. A .env file and STRONGBOX_* environment variables override it.

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
ENV_HOME = "STRONGBOX_HOME"
ENV_LOG_LEVEL = "STRONGBOX_LOG_LEVEL"
ENV_DB_NAME = "STRONGBOX_DB_NAME"


class ConfigError(Exception):
    """config.json exists but cannot be read or parsed."""


def default_config_dir() -> Path:
    """Resolve the config directory: $STRONGBOX_HOME or ~/.config/strongbox."""
    home = os.environ.get(ENV_HOME)
    if home:
        return Path(home).expanduser()
    return Path.home() / ".config" / "strongbox"


@dataclass
class Config:
    """Resolved runtime configuration."""

    config_dir: Path = field(default_factory=default_config_dir)
    db_name: str = "pass.db"
    vault_name: str = "master.key"
    log_level: str = "info"
    use_sqlcipher: bool = False

    @property
    def storage_path(self) -> Path:
        return self.config_dir / self.db_name

    @property
    def vault_path(self) -> Path:
        return self.config_dir / self.vault_name

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"

    def to_file_dict(self) -> dict:
        """Fields persisted in config.json (the directory itself is not)."""
        data = asdict(self)
        data.pop("config_dir")
        return data


def load_config(config_dir: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration, writing the defaults on first run.

    Args:
        config_dir: Override the config directory (tests, --config-dir)

    Returns:
        Config with environment overrides applied

    Raises:
        ConfigError: config.json is not valid JSON or not an object
    """
    load_dotenv(find_dotenv(usecwd=True))

    directory = Path(config_dir).expanduser() if config_dir else default_config_dir()
    directory.mkdir(parents=True, exist_ok=True)
    config_path = directory / CONFIG_FILENAME

    config = Config(config_dir=directory)

    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read config {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must contain a JSON object")

        for key in ("db_name", "vault_name", "log_level"):
            if key in data:
                setattr(config, key, str(data[key]))
        if "use_sqlcipher" in data:
            if not isinstance(data["use_sqlcipher"], bool):
                raise ConfigError(
                    f"Config {config_path}: use_sqlcipher must be true or false"
                )
            config.use_sqlcipher = data["use_sqlcipher"]
    else:
        config_path.write_text(
            json.dumps(config.to_file_dict(), indent=2), encoding="utf-8"
        )
        logger.info("Wrote default config to %s", config_path)

    if os.environ.get(ENV_LOG_LEVEL):
        config.log_level = os.environ[ENV_LOG_LEVEL]
    if os.environ.get(ENV_DB_NAME):
        config.db_name = os.environ[ENV_DB_NAME]

    return config

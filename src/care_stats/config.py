"""Configuration management for care_stats."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .models import Period


logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
CONFIG_PATH_ENV = "CARE_STATS_CONFIG"


@dataclass
class ConfigModel:
    """Global configuration model for care_stats."""

    # Statistics defaults
    default_period: Period = Period.MONTH

    # Summary generation
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/"
    summary_timeout: float = 15.0  # seconds

    # File paths
    data_dir: str = "~/.care_stats"

    # Output
    log_level: str = "WARNING"
    use_emoji: bool = True
    use_local_time: bool = True  # day boundaries and labels follow the local timezone

    def __post_init__(self):
        """Post-initialization setup."""
        self.data_dir = os.path.expanduser(self.data_dir)
        if not isinstance(self.default_period, Period):
            try:
                self.default_period = Period.parse(self.default_period)
            except ValueError:
                logger.warning("Unknown default_period %r, using Month", self.default_period)
                self.default_period = Period.MONTH

    @property
    def summary_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "default_period": self.default_period.value,
            "gemini_api_key": self.gemini_api_key,
            "gemini_model": self.gemini_model,
            "gemini_base_url": self.gemini_base_url,
            "summary_timeout": self.summary_timeout,
            "data_dir": self.data_dir,
            "log_level": self.log_level,
            "use_emoji": self.use_emoji,
            "use_local_time": self.use_local_time,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML, ignoring unknown keys."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        return cls(**{key: value for key, value in data.items() if key in known})

    def get_config_path(self) -> Path:
        """Get the config file path."""
        return Path(self.data_dir) / "config.yaml"


def _apply_environment(config: ConfigModel) -> ConfigModel:
    api_key = os.environ.get(API_KEY_ENV)
    if api_key:
        config.gemini_api_key = api_key
    return config


class Config:
    """Configuration manager for care_stats."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file, falling back to defaults."""
        if cls._instance is not None and config_path is None:
            return cls._instance

        config = ConfigModel()

        if config_path is None:
            env_path = os.environ.get(CONFIG_PATH_ENV)
            config_path = Path(env_path) if env_path else config.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    yaml_content = f.read()
                config = ConfigModel.from_yaml(yaml_content)
                logger.debug("Loaded configuration from %s", config_path)
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning("Failed to load config from %s: %s; using defaults", config_path, e)
                config = ConfigModel()

        cls._instance = _apply_environment(config)
        return cls._instance

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = config.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            f.write(config.to_yaml())
        logger.info("Configuration saved to %s", config_path)

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reload(cls) -> ConfigModel:
        """Reload configuration from file."""
        cls._instance = None
        return cls.load()


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    Config.save(config, config_path)

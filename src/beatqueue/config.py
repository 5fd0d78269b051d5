"""Player configuration loaded from YAML."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from beatqueue.exceptions import ConfigError

logger = logging.getLogger(__name__)

RESTART_THRESHOLD = 3.0
HISTORY_LIMIT = 50
MAX_FORMAT_RETRIES = 1
DEFAULT_STORAGE_KEY = "musicAppData"


def _default_storage_path() -> Path:
    return Path.home() / '.beatqueue' / 'state.db'


@dataclass
class PlayerConfig:
    shuffle_rounds: int = 10
    restart_threshold: float = RESTART_THRESHOLD
    history_limit: int = HISTORY_LIMIT
    default_volume: float = 0.6
    max_format_retries: int = MAX_FORMAT_RETRIES
    storage_path: Path = field(default_factory=_default_storage_path)
    storage_key: str = DEFAULT_STORAGE_KEY

    def __post_init__(self):
        self.storage_path = Path(self.storage_path).expanduser()
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.shuffle_rounds < 1:
            raise ConfigError(f"shuffle_rounds must be at least 1, got {self.shuffle_rounds}")
        if self.restart_threshold < 0:
            raise ConfigError(f"restart_threshold must not be negative, got {self.restart_threshold}")
        if self.history_limit < 0:
            raise ConfigError(f"history_limit must not be negative, got {self.history_limit}")
        if not 0.0 <= self.default_volume <= 1.0:
            raise ConfigError(f"default_volume must be within 0.0-1.0, got {self.default_volume}")
        if self.max_format_retries < 0:
            raise ConfigError(f"max_format_retries must not be negative, got {self.max_format_retries}")
        if not self.storage_key:
            raise ConfigError("storage_key must not be empty")

    @classmethod
    def load_config(cls, config_path: Path) -> 'PlayerConfig':
        """Load configuration from YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found at {config_path}")

        with open(config_path) as f:
            try:
                config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        # Handle both flat and nested structures
        if 'playback' in config_data or 'storage' in config_data:
            playback = config_data.get('playback') or {}
            storage = config_data.get('storage') or {}
            values: Dict[str, Any] = {
                'shuffle_rounds': playback.get('shuffle_rounds'),
                'restart_threshold': playback.get('restart_threshold'),
                'history_limit': playback.get('history_limit'),
                'default_volume': playback.get('default_volume'),
                'max_format_retries': playback.get('max_format_retries'),
                'storage_path': storage.get('path'),
                'storage_key': storage.get('key'),
            }
        else:
            values = {name: config_data.get(name) for name in cls.__dataclass_fields__}

        try:
            return cls(**_coerce({k: v for k, v in values.items() if v is not None}))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {config_path}: {e}") from e

    def save_config(self, config_path: Path):
        """Save configuration to YAML file."""
        config_data = {
            'playback': {
                'shuffle_rounds': self.shuffle_rounds,
                'restart_threshold': self.restart_threshold,
                'history_limit': self.history_limit,
                'default_volume': self.default_volume,
                'max_format_retries': self.max_format_retries,
            },
            'storage': {
                'path': str(self.storage_path),
                'key': self.storage_key,
            },
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False)


_CASTS = {
    'shuffle_rounds': int,
    'restart_threshold': float,
    'history_limit': int,
    'default_volume': float,
    'max_format_retries': int,
    'storage_path': Path,
    'storage_key': str,
}


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    return {name: _CASTS[name](value) for name, value in values.items() if name in _CASTS}


DEFAULT_CONFIG = PlayerConfig()


def find_config(config_path: Optional[Path] = None) -> PlayerConfig:
    """Load configuration from standard locations or the given path.

    Falls back to defaults when no file exists anywhere.
    """
    config_locations = [
        config_path,
        Path.home() / '.config' / 'beatqueue' / 'config.yml',
        Path.cwd() / 'beatqueue.yaml',
    ]

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    for path in config_locations:
        if path and path.exists():
            config = PlayerConfig.load_config(path)
            logger.info(f"Loaded configuration from {path}")
            return config

    logger.debug("No configuration file found, using defaults")
    return PlayerConfig()

"""
Configuration for RecallForge.

The Config dataclass aggregates the nested configs for each component and
is created once at startup, then passed down the dependency chain:

    config.yaml (optional)
           ↓
    load_config() → Config object
           ↓
    Passed to: WeightModel, ReviewScheduler, storage factory, logging

Configuration Hierarchy
-----------------------
    Config
    ├── WeightConfig       # Selection weight constants
    ├── SchedulerConfig    # Review interval constants
    ├── StorageConfig      # Backend selection and database path
    └── LoggingConfig      # Log level and optional log file

Environment Variables
---------------------
Values in config.yaml may use ${VAR_NAME} or ${VAR_NAME:default}. After the
file is read, these variables override individual fields:

    RECALLFORGE_DB_PATH          storage.path
    RECALLFORGE_STORAGE_BACKEND  storage.backend
    RECALLFORGE_LOG_LEVEL        logging.level

Every field has a default, so zero-config operation works. Validation runs
in __post_init__ and raises ConfigValidationError.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from recallforge.core.exceptions import ConfigValidationError

DEFAULT_CONFIG_FILE = "config.yaml"
STORAGE_BACKENDS = ("sqlite", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class WeightConfig:
    """Constants for selection weights."""

    base_weight: int = 100
    confidence_multiplier: int = 20
    difficulty_multiplier: int = 10
    recency_multiplier: int = 5
    recency_cap: int = 100
    forgetting_scale_days: float = 5.0
    # Days assumed for an item that has never been reviewed
    never_reviewed_days: int = 36500

    def __post_init__(self) -> None:
        if self.forgetting_scale_days <= 0:
            raise ConfigValidationError(
                "weights.forgetting_scale_days",
                self.forgetting_scale_days,
                "must be positive",
            )
        for name in ("base_weight", "recency_cap", "never_reviewed_days"):
            if getattr(self, name) < 0:
                raise ConfigValidationError(
                    f"weights.{name}", getattr(self, name), "must not be negative"
                )


@dataclass
class SchedulerConfig:
    """Constants for review intervals."""

    base_interval_hours: float = 6.0
    success_growth: float = 2.0
    failure_divisor: float = 2.0
    difficulty_offset: float = 0.5

    def __post_init__(self) -> None:
        for name in ("base_interval_hours", "success_growth", "failure_divisor"):
            if getattr(self, name) <= 0:
                raise ConfigValidationError(
                    f"scheduler.{name}", getattr(self, name), "must be positive"
                )
        if self.difficulty_offset < 0:
            raise ConfigValidationError(
                "scheduler.difficulty_offset",
                self.difficulty_offset,
                "must not be negative",
            )


@dataclass
class StorageConfig:
    """Storage backend configuration."""

    backend: str = "sqlite"  # sqlite, memory, or a registered backend name
    path: str = ".data/recall.db"

    def __post_init__(self) -> None:
        if not isinstance(self.backend, str):
            raise ConfigValidationError(
                "storage.backend", self.backend, "expected a backend name string"
            )
        if not isinstance(self.path, str):
            raise ConfigValidationError("storage.path", self.path, "expected a path string")
        self.backend = self.backend.strip().lower()
        if not self.backend:
            raise ConfigValidationError(
                "storage.backend",
                self.backend,
                f"expected one of {', '.join(STORAGE_BACKENDS)} or a registered backend",
            )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.level, str):
            raise ConfigValidationError(
                "logging.level", self.level, f"expected one of {', '.join(LOG_LEVELS)}"
            )
        if self.file is not None and not isinstance(self.file, str):
            raise ConfigValidationError("logging.file", self.file, "expected a path string")
        self.level = self.level.upper()
        if self.level not in LOG_LEVELS:
            raise ConfigValidationError(
                "logging.level", self.level, f"expected one of {', '.join(LOG_LEVELS)}"
            )


@dataclass
class Config:
    """Main RecallForge configuration."""

    weights: WeightConfig = field(default_factory=WeightConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    base_path: Path = field(default_factory=Path.cwd)

    @property
    def database_path(self) -> Path:
        """Absolute path of the SQLite database."""
        path = Path(self.storage.path).expanduser()
        if path.is_absolute():
            return path
        return self.base_path / path

    @property
    def log_file_path(self) -> Optional[Path]:
        """Absolute path of the log file, if file logging is enabled."""
        if not self.logging.file:
            return None
        path = Path(self.logging.file).expanduser()
        return path if path.is_absolute() else self.base_path / path

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_path: Optional[Path] = None) -> "Config":
        """Build a Config from a parsed YAML mapping.

        Unknown keys are ignored so older config files keep loading.
        """
        sections = {
            "weights": WeightConfig,
            "scheduler": SchedulerConfig,
            "storage": StorageConfig,
            "logging": LoggingConfig,
        }
        kwargs: Dict[str, Any] = {}
        for name, section_cls in sections.items():
            raw = data.get(name) or {}
            if not isinstance(raw, dict):
                raise ConfigValidationError(name, raw, "must be a mapping")
            types = {f.name: f.type for f in fields(section_cls)}
            values = {
                k: _coerce(f"{name}.{k}", v, types[k])
                for k, v in raw.items()
                if k in types
            }
            kwargs[name] = section_cls(**values)
        if base_path is not None:
            kwargs["base_path"] = base_path
        return cls(**kwargs)


def _coerce(field_name: str, value: Any, type_name: Any) -> Any:
    """Convert expanded ${VAR} strings to the numeric type a field expects."""
    if not isinstance(value, str) or type_name not in ("int", "float"):
        return value
    try:
        return int(value) if type_name == "int" else float(value)
    except ValueError as e:
        raise ConfigValidationError(field_name, value, f"expected {type_name}") from e


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Handles ${VAR_NAME} and ${VAR_NAME:default} inside strings, nested
    dictionaries and lists.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def apply_env_overrides(config: Config) -> Config:
    """Apply RECALLFORGE_* environment variables on top of a config."""
    db_path = os.environ.get("RECALLFORGE_DB_PATH")
    if db_path:
        config.storage.path = db_path

    backend = os.environ.get("RECALLFORGE_STORAGE_BACKEND")
    if backend:
        config.storage = StorageConfig(backend=backend, path=config.storage.path)

    level = os.environ.get("RECALLFORGE_LOG_LEVEL")
    if level:
        config.logging = LoggingConfig(level=level, file=config.logging.file)

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML, falling back to defaults.

    Args:
        config_path: Path to config.yaml (defaults to ./config.yaml)

    Returns:
        Validated Config

    Raises:
        ConfigValidationError: If the file is malformed or a value is invalid
    """
    path = config_path or Path.cwd() / DEFAULT_CONFIG_FILE

    if not path.exists():
        return apply_env_overrides(Config())

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigValidationError(str(path), None, f"invalid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigValidationError(str(path), raw, "top level must be a mapping")

    config = Config.from_dict(expand_env_vars(raw), base_path=path.resolve().parent)
    return apply_env_overrides(config)


__all__ = [
    "Config",
    "WeightConfig",
    "SchedulerConfig",
    "StorageConfig",
    "LoggingConfig",
    "expand_env_vars",
    "load_config",
]

"""Configuration for secret-rotation.

Settings are layered, lowest to highest priority:

    defaults
       |
       +---> FileConfigSource (YAML or JSON, --config or SECRET_ROTATION_CONFIG)
       +---> EnvConfigSource  (SECRET_ROTATION_<FIELD>)
       +---> AWS_REGION / AWS_DEFAULT_REGION (region only, when nothing else set it)
       |
       v
    RotationConfig (validated)

Usage:
    >>> from secret_rotation.config import load_config
    >>>
    >>> config = load_config("rotation.yaml")
    >>> config.secret_name("dev")
    'dev/web3-auth/auth-service-api'
    >>> config.kms_alias("prd")
    'alias/mmcx/prd/auth-service-api'
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from secret_rotation.retention.base import (
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    LABEL_WARNING_THRESHOLD,
    MAX_LABELS_PER_SECRET,
)
from secret_rotation.secrets.cloud import DEFAULT_REGION

ENV_PREFIX = "SECRET_ROTATION"
CONFIG_PATH_ENV = f"{ENV_PREFIX}_CONFIG"

DEFAULT_SECRET_NAME_TEMPLATE = "{environment}/web3-auth/auth-service-api"
DEFAULT_KMS_ALIAS_TEMPLATE = "alias/mmcx/{environment}/auth-service-api"
DEFAULT_GOOGLE_KMS_ALIAS_TEMPLATE = "alias/mmcx/{environment}/auth-service"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(Exception):
    """Base configuration error."""

    pass


class ConfigValidationError(ConfigError):
    """Configuration validation error."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {', '.join(errors)}")


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class RotationConfig:
    """Settings shared by the rotation workflows and the CLI.

    Attributes:
        region: AWS region for Secrets Manager and KMS.
        secret_name_template: Secret name, formatted with ``environment``.
        kms_alias_template: KMS key alias, formatted with ``environment``.
        google_kms_alias_template: KMS key alias for the Google client secret.
        environments: Deployment environments rotation may target.
        apps: Applications that own client secrets.
        keep_count: Default number of timestamp labels kept by cleanup.
        keep_days: Default age window (days) exempt from cleanup.
        label_limit: Staging labels allowed per secret.
        label_warning_threshold: Label count that triggers a warning.
        max_workers: Concurrent label removals.
        log_level: Logging level name.
        log_format: "console" or "json".
    """

    region: str = DEFAULT_REGION
    secret_name_template: str = DEFAULT_SECRET_NAME_TEMPLATE
    kms_alias_template: str = DEFAULT_KMS_ALIAS_TEMPLATE
    google_kms_alias_template: str = DEFAULT_GOOGLE_KMS_ALIAS_TEMPLATE
    environments: list[str] = field(default_factory=lambda: ["dev", "uat", "prd"])
    apps: list[str] = field(default_factory=lambda: ["main", "flask"])
    keep_count: int = DEFAULT_KEEP_COUNT
    keep_days: int = DEFAULT_KEEP_DAYS
    label_limit: int = MAX_LABELS_PER_SECRET
    label_warning_threshold: int = LABEL_WARNING_THRESHOLD
    max_workers: int = 4
    log_level: str = "WARNING"
    log_format: str = "console"

    def secret_name(self, environment: str) -> str:
        return self.secret_name_template.format(environment=environment)

    def kms_alias(self, environment: str) -> str:
        return self.kms_alias_template.format(environment=environment)

    def google_kms_alias(self, environment: str) -> str:
        return self.google_kms_alias_template.format(environment=environment)

    def validate(self) -> list[str]:
        """Return a list of problems (empty when valid)."""
        errors: list[str] = []

        if not self.region:
            errors.append("region must not be empty")
        for name in ("secret_name_template", "kms_alias_template", "google_kms_alias_template"):
            template = getattr(self, name)
            if "{environment}" not in template:
                errors.append(f"{name} must contain '{{environment}}'")
                continue
            try:
                template.format(environment="dev")
            except (KeyError, IndexError, ValueError) as e:
                errors.append(f"{name} is not a valid template: {e}")

        if not self.environments:
            errors.append("environments must not be empty")
        if not self.apps:
            errors.append("apps must not be empty")

        for name in ("keep_count", "keep_days"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must be non-negative")
        if self.label_limit < 1:
            errors.append("label_limit must be at least 1")
        if not 0 < self.label_warning_threshold <= self.label_limit:
            errors.append("label_warning_threshold must be between 1 and label_limit")
        if self.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        return errors

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RotationConfig":
        """Build a validated config from already-merged settings.

        Raises:
            ConfigValidationError: On unknown keys, wrong types or invalid values.
        """
        known = {f.name: f for f in fields(cls)}
        errors = [f"unknown setting '{key}'" for key in data if key not in known]

        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            try:
                values[key] = _coerce(key, value, _field_kind(cls, key))
            except (TypeError, ValueError) as e:
                errors.append(str(e))

        if errors:
            raise ConfigValidationError(errors)

        config = cls(**values)
        errors = config.validate()
        if errors:
            raise ConfigValidationError(errors)
        return config


def _field_kind(cls: type, name: str) -> type:
    default = cls()
    return type(getattr(default, name))


def _coerce(name: str, value: Any, kind: type) -> Any:
    """Convert a raw setting to the field's type."""
    if kind is list:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                value = json.loads(stripped)
            else:
                value = [item.strip() for item in stripped.split(",") if item.strip()]
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise TypeError(f"{name} must be a list of strings")
        return list(value)

    if kind is int:
        if isinstance(value, bool):
            raise TypeError(f"{name} must be an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise ValueError(f"{name} must be an integer, got {value!r}") from None
        raise TypeError(f"{name} must be an integer")

    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    return value


# =============================================================================
# Sources
# =============================================================================


class EnvConfigSource:
    """Environment variable configuration source.

    Example:
        SECRET_ROTATION_KEEP_COUNT=5
        SECRET_ROTATION_APPS=main,flask

        Will produce:
        {"keep_count": "5", "apps": "main,flask"}
    """

    def __init__(self, environ: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX) -> None:
        self._environ = environ
        self._prefix = f"{prefix}_"

    def load(self) -> dict[str, Any]:
        environ = os.environ if self._environ is None else self._environ
        result: dict[str, Any] = {}
        for key, value in environ.items():
            if not key.startswith(self._prefix) or key == CONFIG_PATH_ENV:
                continue
            result[key[len(self._prefix) :].lower()] = value
        return result


class FileConfigSource:
    """YAML or JSON configuration file, detected from the extension."""

    def __init__(self, path: str | Path, *, required: bool = True) -> None:
        self._path = Path(path)
        self._required = required

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            if self._required:
                raise ConfigError(f"Configuration file not found: {self._path}")
            return {}

        try:
            content = self._path.read_text(encoding="utf-8")
            suffix = self._path.suffix.lower()
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif suffix == ".json":
                data = json.loads(content)
            else:
                raise ConfigError(f"Unsupported file format: {suffix}")
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {self._path} must contain a mapping")
        return data


# =============================================================================
# Global Configuration
# =============================================================================


_config: RotationConfig | None = None
_lock = threading.RLock()


def load_config(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> RotationConfig:
    """Load configuration from defaults, a file and the environment.

    Args:
        path: Configuration file. Falls back to SECRET_ROTATION_CONFIG.
        environ: Mapping to read instead of os.environ.

    Returns:
        Validated RotationConfig.

    Raises:
        ConfigError: If the file cannot be read.
        ConfigValidationError: If settings are unknown or invalid.
    """
    env = os.environ if environ is None else environ
    merged: dict[str, Any] = {}

    config_path = path or env.get(CONFIG_PATH_ENV)
    if config_path:
        merged.update(FileConfigSource(config_path).load())

    merged.update(EnvConfigSource(env).load())

    if "region" not in merged:
        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if region:
            merged["region"] = region

    return RotationConfig.from_dict(merged)


def get_config() -> RotationConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config

    with _lock:
        if _config is None:
            _config = load_config()
        return _config


def set_config(config: RotationConfig) -> None:
    """Replace the process-wide configuration."""
    global _config

    with _lock:
        _config = config


def reset_config() -> None:
    """Forget the process-wide configuration."""
    global _config

    with _lock:
        _config = None

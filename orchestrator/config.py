"""
Orchestrator - Configuration.

============================================================
CONFIGURATION LAYERS
============================================================

Every numeric threshold in the scanner is configurable.
Configuration is resolved in order, later layers winning:
- Default values (dataclass defaults in each package)
- YAML config file (one mapping per section)
- Environment variables SCANNER_<SECTION>_<FIELD>

Sections:
- fetch      FetchConfig
- discovery  DiscoveryConfig
- analyzer   VolumeAnalyzerConfig
- social     SocialConfig
- explosion  ExplosionScoreConfig (nested: weights)
- surge      SurgeScoreConfig
- job        JobConfig

Examples:
    SCANNER_FETCH_MAX_REQUESTS=30
    SCANNER_JOB_DATA_SOURCE=synthetic
    SCANNER_EXPLOSION_WEIGHTS_VIRAL=0.4

============================================================
"""

import logging
import os
import typing
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from core.exceptions import ConfigurationError
from data_processing.config import VolumeAnalyzerConfig
from data_sources.config import DiscoveryConfig, FetchConfig
from data_sources.factory import SOURCE_KINDS
from scoring_engine.config import ExplosionScoreConfig, SurgeScoreConfig
from sentiment.config import SocialConfig


logger = logging.getLogger(__name__)


ENV_PREFIX = "SCANNER"
CONFIG_FILE_ENV = "SCANNER_CONFIG_FILE"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text")


# =============================================================
# JOB SETTINGS
# =============================================================


@dataclass
class JobConfig:
    """Job manager and runtime settings."""
    concurrency: int = 3
    max_jobs: int = 100

    # Result cache
    cache_ttl: float = 300.0
    cache_check_period: float = 30.0

    # Market data source: live | synthetic
    data_source: str = "live"
    seed: int = 42

    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self) -> None:
        if self.concurrency <= 0:
            raise ConfigurationError(
                "concurrency must be positive",
                config_key="job.concurrency",
                actual_value=self.concurrency,
            )
        if self.max_jobs <= 0:
            raise ConfigurationError(
                "max_jobs must be positive",
                config_key="job.max_jobs",
                actual_value=self.max_jobs,
            )
        if self.cache_ttl <= 0 or self.cache_check_period <= 0:
            raise ConfigurationError(
                "cache_ttl and cache_check_period must be positive",
                config_key="job.cache_ttl",
                actual_value=self.cache_ttl,
            )
        if self.data_source not in SOURCE_KINDS:
            raise ConfigurationError(
                f"data_source must be one of {SOURCE_KINDS}",
                config_key="job.data_source",
                actual_value=self.data_source,
            )
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {LOG_LEVELS}",
                config_key="job.log_level",
                actual_value=self.log_level,
            )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {LOG_FORMATS}",
                config_key="job.log_format",
                actual_value=self.log_format,
            )


# =============================================================
# MAIN CONFIGURATION
# =============================================================


@dataclass
class ScannerConfig:
    """
    Main configuration for the scanner.

    Combines all sub-configurations.
    """
    fetch: FetchConfig = field(default_factory=FetchConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    analyzer: VolumeAnalyzerConfig = field(default_factory=VolumeAnalyzerConfig)
    social: SocialConfig = field(default_factory=SocialConfig)
    explosion: ExplosionScoreConfig = field(default_factory=ExplosionScoreConfig)
    surge: SurgeScoreConfig = field(default_factory=SurgeScoreConfig)
    job: JobConfig = field(default_factory=JobConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScannerConfig":
        """
        Build from a nested mapping; missing keys keep their defaults.

        Raises:
            ConfigurationError: unknown key or invalid value
        """
        return _build(cls, data, "")

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ScannerConfig":
        """Load configuration from YAML file."""
        return cls.from_dict(_read_yaml(path))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScannerConfig":
        """Load configuration from environment variables."""
        return cls.from_dict(_env_overrides(cls, environ))

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ScannerConfig":
        """Defaults, then the YAML file (if any), then the environment."""
        data: Dict[str, Any] = _read_yaml(path) if path else {}
        _merge(data, _env_overrides(cls, environ))
        config = cls.from_dict(data)
        logger.debug(f"[config] Loaded (yaml={path or '-'}, source={config.job.data_source})")
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetch": self.fetch.to_dict(),
            "discovery": self.discovery.to_dict(),
            "analyzer": self.analyzer.to_dict(),
            "social": self.social.to_dict(),
            "explosion": self.explosion.to_dict(),
            "surge": self.surge.to_dict(),
            "job": {
                "concurrency": self.job.concurrency,
                "max_jobs": self.job.max_jobs,
                "cache_ttl": self.job.cache_ttl,
                "cache_check_period": self.job.cache_check_period,
                "data_source": self.job.data_source,
                "seed": self.job.seed,
                "log_level": self.job.log_level,
                "log_format": self.job.log_format,
            },
        }


# =============================================================
# LOADING HELPERS
# =============================================================


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read config file {path}: {e}",
            config_key="config_file",
            cause=e,
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}: {e}",
            config_key="config_file",
            cause=e,
        )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping",
            config_key="config_file",
            actual_value=type(data).__name__,
        )
    return data


def _env_overrides(
    cls: type,
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = ENV_PREFIX,
) -> Dict[str, Any]:
    """Collect SCANNER_* variables into a nested mapping of raw strings."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}

    for f in fields(cls):
        name = f"{prefix}_{f.name.upper()}"
        target = _unwrap_optional(_field_type(cls, f))
        if is_dataclass(target):
            nested = _env_overrides(target, environ, name)
            if nested:
                overrides[f.name] = nested
        else:
            value = environ.get(name)
            if value:
                overrides[f.name] = value
    return overrides


def _merge(base: Dict[str, Any], extra: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in extra.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _build(cls: type, data: Any, path: str) -> Any:
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Section '{path or 'root'}' must be a mapping",
            config_key=path or "root",
            actual_value=data,
        )

    known = {f.name: f for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        key_path = f"{path}.{key}" if path else key
        f = known.get(key)
        if f is None:
            raise ConfigurationError(f"Unknown setting '{key_path}'", config_key=key_path)

        target = _unwrap_optional(_field_type(cls, f))
        if is_dataclass(target):
            kwargs[key] = _build(target, value, key_path)
        else:
            kwargs[key] = _coerce(value, target, key_path)

    try:
        return cls(**kwargs)
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid settings for '{path or 'root'}': {e}",
            config_key=path or "root",
            cause=e,
        )


def _field_type(cls: type, f: Any) -> Any:
    if isinstance(f.type, str):
        return typing.get_type_hints(cls)[f.name]
    return f.type


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) is Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce(value: Any, target: Any, key: str) -> Any:
    if value is None:
        return None
    try:
        if target is bool:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE:
                    return True
                if lowered in _FALSE:
                    return False
                raise ValueError(f"not a boolean: {value!r}")
            return bool(value)
        if target is int:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"not an integer: {value!r}")
            return int(value)
        if target is float:
            return float(value)
        if target is str:
            return str(value)
        if typing.get_origin(target) is tuple:
            if isinstance(value, str):
                value = yaml.safe_load(value)
            return tuple(
                tuple(item) if isinstance(item, (list, tuple)) else item
                for item in value
            )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for '{key}': {e}",
            config_key=key,
            actual_value=value,
            cause=e,
        )
    return value

"""
Runtime Configuration

Central configuration for hash selection, build parallelism and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from merkle_core.crypto.hashing import DEFAULT_ALGORITHM, HashlibHasher, get_hasher
from merkle_core.schemas.errors import ConfigurationException

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "MERKLE_"


@dataclass
class HashingConfig:
    """Configuration for the digest primitive."""
    algorithm: str = DEFAULT_ALGORITHM

    def __post_init__(self):
        if not isinstance(self.algorithm, str) or not self.algorithm:
            raise ConfigurationException(
                f"algorithm must be a non-empty string, got {self.algorithm!r}",
                key="hashing.algorithm",
            )


@dataclass
class BuildConfig:
    """Configuration for tree construction."""
    max_workers: int = 1

    def __post_init__(self):
        # bool is an int subclass; `max_workers: true` is not a pool size
        if (
            isinstance(self.max_workers, bool)
            or not isinstance(self.max_workers, int)
            or self.max_workers < 1
        ):
            raise ConfigurationException(
                f"max_workers must be a positive integer, got {self.max_workers!r}",
                key="build.max_workers",
            )


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    hashing: HashingConfig = field(default_factory=HashingConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - MERKLE_HASH_ALGORITHM: hashlib algorithm name
        - MERKLE_MAX_WORKERS: thread pool size for tree builds
        - MERKLE_LOG_LEVEL: log level name
        - MERKLE_LOG_FILE: optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides.setdefault("hashing", {})["algorithm"] = os.getenv(
                f"{ENV_PREFIX}HASH_ALGORITHM"
            )

        workers = os.getenv(f"{ENV_PREFIX}MAX_WORKERS")
        if workers:
            try:
                overrides.setdefault("build", {})["max_workers"] = int(workers)
            except ValueError as e:
                raise ConfigurationException(
                    f"{ENV_PREFIX}MAX_WORKERS must be an integer, got {workers!r}",
                    key="build.max_workers",
                ) from e

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationException(
                    f"Invalid YAML in config file: {e}",
                    details={"path": str(path)},
                ) from e

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping, got {type(data).__name__}",
                details={"path": str(path)},
            )
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        hashing_data = data.get("hashing") or {}
        build_data = data.get("build") or {}

        try:
            hashing = HashingConfig(**hashing_data)
            build = BuildConfig(**build_data)
        except TypeError as e:
            raise ConfigurationException(f"Invalid configuration section: {e}") from e

        return cls(
            hashing=hashing,
            build=build,
            log_level=str(data.get("log_level", "INFO")).upper(),
            log_file=data.get("log_file"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        Lets a config file be loaded first, then overlaid with env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        if "hashing" in overrides:
            new_config.hashing = HashingConfig(**overrides["hashing"])

        if "build" in overrides:
            new_config.build = BuildConfig(**overrides["build"])

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        return new_config

    def make_hasher(self) -> HashlibHasher:
        """
        Hasher for the configured algorithm.

        Raises:
            UnsupportedHashAlgorithmException: If the algorithm is unusable
        """
        return get_hasher(self.hashing.algorithm)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hashing": {
                "algorithm": self.hashing.algorithm,
            },
            "build": {
                "max_workers": self.build.max_workers,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }


def get_default_config_template() -> str:
    """Template YAML configuration file."""
    return """\
hashing:
  algorithm: sha256
build:
  max_workers: 1
log_level: INFO
log_file: null
"""


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set (or reset with None) the default runtime configuration."""
    global _default_config
    _default_config = config

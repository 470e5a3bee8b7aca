"""
Runtime Configuration Module

Provides configuration loading and management for Merkle tree builds.
"""

from .runtime import (
    BuildConfig,
    HashingConfig,
    RuntimeConfig,
    get_default_config,
    get_default_config_template,
    set_default_config,
)

__all__ = [
    "BuildConfig",
    "HashingConfig",
    "RuntimeConfig",
    "get_default_config",
    "get_default_config_template",
    "set_default_config",
]

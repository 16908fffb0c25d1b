"""Validator configuration."""

from csf.config.framework_config import (
    ENV_CONFIG_PATH,
    ENV_VALID_TOOLS,
    FrameworkConfig,
    get_framework_config,
    load_framework_config,
)

__all__ = [
    "ENV_CONFIG_PATH",
    "ENV_VALID_TOOLS",
    "FrameworkConfig",
    "get_framework_config",
    "load_framework_config",
]

"""Framework validator configuration registry.

Loads the required components, the approved tool allow-list and the
documentation/integration expectations from framework.yaml.
Environment variables take precedence over YAML config.

Usage:
    from csf.config.framework_config import get_framework_config, load_framework_config

    config = get_framework_config()           # packaged defaults (cached)
    config = load_framework_config(path)      # explicit file, never cached

Environment:
    CSF_VALIDATOR_CONFIG: path to an alternative YAML file
    CSF_VALID_TOOLS: comma-separated override for ``valid_tools``
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from csf.validator.errors import ConfigError

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "framework.yaml"
_cached_config: Optional["FrameworkConfig"] = None

ENV_CONFIG_PATH = "CSF_VALIDATOR_CONFIG"
ENV_VALID_TOOLS = "CSF_VALID_TOOLS"


@dataclass(frozen=True)
class FrameworkConfig:
    """Resolved validator configuration.

    Attributes:
        required_agents: Agent keys a complete framework must ship.
        required_commands: Command keys forming the complete workflow chain.
        valid_tools: Approved tool capability names.
        argument_placeholder: Token command bodies must contain.
        required_phrases: Phrases CLAUDE.md must contain.
        required_sections: Section headings CLAUDE.md must contain.
        readme_sections: Section headings README.md must contain.
        template_dirs: Sub-directories expected under templates/.
        core_templates: Files expected directly under templates/.
        source: Where the values came from (file path).
    """

    required_agents: Tuple[str, ...] = ()
    required_commands: Tuple[str, ...] = ()
    valid_tools: Tuple[str, ...] = ()
    argument_placeholder: str = "$ARGUMENTS"
    required_phrases: Tuple[str, ...] = ()
    required_sections: Tuple[str, ...] = ()
    readme_sections: Tuple[str, ...] = ()
    template_dirs: Tuple[str, ...] = ()
    core_templates: Tuple[str, ...] = ()
    source: str = "default"


def _string_list(data: Dict[str, Any], key: str, source: Path) -> Tuple[str, ...]:
    value = data.get(key, [])
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{source}: '{key}' must be a list of strings")
    return tuple(item.strip() for item in value if item.strip())


def _section(data: Dict[str, Any], key: str, source: Path) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{source}: '{key}' must be a mapping")
    return value


def _parse_config(data: Dict[str, Any], source: Path) -> FrameworkConfig:
    integration = _section(data, "integration", source)
    documentation = _section(data, "documentation", source)

    placeholder = data.get("argument_placeholder", "$ARGUMENTS")
    if not isinstance(placeholder, str) or not placeholder.strip():
        raise ConfigError(f"{source}: 'argument_placeholder' must be a non-empty string")

    return FrameworkConfig(
        required_agents=_string_list(data, "required_agents", source),
        required_commands=_string_list(data, "required_commands", source),
        valid_tools=_string_list(data, "valid_tools", source),
        argument_placeholder=placeholder.strip(),
        required_phrases=_string_list(integration, "required_phrases", source),
        required_sections=_string_list(integration, "required_sections", source),
        readme_sections=_string_list(documentation, "readme_sections", source),
        template_dirs=_string_list(documentation, "template_dirs", source),
        core_templates=_string_list(documentation, "core_templates", source),
        source=str(source),
    )


def _apply_env_overrides(config: FrameworkConfig) -> FrameworkConfig:
    tools_env = os.environ.get(ENV_VALID_TOOLS)
    if tools_env is None:
        return config

    tools: List[str] = [tool.strip() for tool in tools_env.split(",") if tool.strip()]
    logger.debug("Overriding valid_tools from %s: %s", ENV_VALID_TOOLS, tools)
    return replace(config, valid_tools=tuple(tools))


def load_framework_config(path: Optional[Path] = None) -> FrameworkConfig:
    """Load configuration from a YAML file.

    Args:
        path: Config file. Defaults to $CSF_VALIDATOR_CONFIG, then the
            packaged framework.yaml.

    Returns:
        FrameworkConfig with environment overrides applied.

    Raises:
        ConfigError: If the file is missing, unparseable or has wrong types.
    """
    if path is None:
        env_path = os.environ.get(ENV_CONFIG_PATH)
        path = Path(env_path) if env_path else _CONFIG_PATH
    path = Path(path)

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    logger.debug("Loaded validator config from %s", path)
    return _apply_env_overrides(_parse_config(data, path))


def get_framework_config() -> FrameworkConfig:
    """Load the default configuration, with caching."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_framework_config()
    return _cached_config

import os
from typing import Any, Dict

import yaml


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path (str): Path to the configuration file

    Returns:
        dict: Configuration dictionary
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as file:
        config = yaml.safe_load(file)

    return config or {}


def expand_env(value: Any) -> Any:
    """
    Expand ${ENV_VAR} references inside string values, recursively.

    Placeholders whose variable is unset expand to an empty string.

    Args:
        value: A scalar, list or mapping read from YAML

    Returns:
        The same structure with environment references expanded
    """
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if expanded.startswith("${") and expanded.endswith("}"):
            return ""
        return expanded
    return value


def get_section(section: str, config_path: str = "config.yaml") -> Dict[str, Any]:
    """
    Get one top-level section of the configuration file, env-expanded.

    Args:
        section (str): Section name (e.g. "llm", "platform")
        config_path (str): Path to the configuration file

    Returns:
        dict: Section configuration, empty when absent
    """
    config = load_config(config_path)
    return expand_env(config.get(section, {}) or {})

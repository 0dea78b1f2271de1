"""Config loading and profile deep merge."""

import os

import yaml

from appdock.config.types import WebAppConfig

DEFAULT_CONFIG_FILE = "appdock.yaml"


def deep_merge(base, override):
    """Recursive dict merge. Override wins for scalars and lists."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_raw_config(config_path, profile=None):
    """Read the YAML config, optionally deep-merging a named profile. Returns a dict."""
    if os.path.isdir(config_path):
        config_path = os.path.join(config_path, DEFAULT_CONFIG_FILE)
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    profiles = config.pop("profiles", {}) or {}

    if profile is not None:
        if profile not in profiles:
            available = ", ".join(sorted(profiles.keys())) if profiles else "none"
            raise ValueError(f"Unknown profile '{profile}'. Available profiles: {available}")
        config = deep_merge(config, profiles[profile])

    return config


def load_config(config_path, profile=None) -> WebAppConfig:
    """Load a WebAppConfig from a YAML file (or a directory holding appdock.yaml)."""
    config = load_raw_config(config_path, profile)
    base_dir = config_path if os.path.isdir(config_path) else os.path.dirname(os.path.abspath(config_path))
    return WebAppConfig.from_dict(config, base_dir=base_dir)

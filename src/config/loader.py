"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

    1. config/config.yaml  -- static defaults checked into the repo
    2. .env file           -- local developer overrides (not committed)
    3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file, then deep-merges the values that
:class:`Settings` resolved from the environment on top of it.
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
        },
        "advisory": {
            "enabled": settings.advisory_enabled,
            "timeout_seconds": settings.advisory_timeout_seconds,
            "max_lines": settings.advisory_max_lines,
            "dedup_threshold": settings.advisory_dedup_threshold,
            "dedup_prefix_chars": settings.advisory_dedup_prefix_chars,
        },
        "forms": {
            "transform_manual_edits": settings.forms_transform_manual_edits,
            "session_ttl_seconds": settings.form_session_ttl_seconds,
            "session_max": settings.form_session_max,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value

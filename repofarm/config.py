"""
Configuration loading for repofarm.

Finds the YAML document, merges its ``settings`` section over the defaults
and environment overrides, and builds the validated Configuration.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .domain.configuration import Configuration
from .infra.file_store import YamlFileStore

logger = logging.getLogger(__name__)

CONFIG_ENV = 'REPOFARM_CONFIG'
ENV_PREFIX = 'REPOFARM_'


def get_config_path(explicit: Optional[Union[str, Path]] = None) -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. An explicitly given path (--config)
    2. REPOFARM_CONFIG environment variable
    3. $XDG_CONFIG_HOME/repofarm/config.yaml
    4. ~/.config/repofarm/config.yaml
    """
    if explicit:
        return Path(explicit).expanduser()

    if os.environ.get(CONFIG_ENV):
        return Path(os.environ[CONFIG_ENV]).expanduser()

    xdg = os.environ.get('XDG_CONFIG_HOME')
    base = Path(xdg).expanduser() if xdg else Path.home() / '.config'
    return base / 'repofarm' / 'config.yaml'


def get_default_settings() -> Dict[str, Any]:
    """Get default settings."""
    return {
        "jobs": 1,
        "quick_message": "repofarm: quick commit",
        "git_timeout": 300,
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(settings):
    """
    Apply environment variable overrides to settings.
    Environment variables follow the pattern: REPOFARM_SECTION_KEY
    For example: REPOFARM_JOBS=4 or REPOFARM_LOGGING_LEVEL=DEBUG
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV:
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = settings
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            # End of the variable name: this is the key to set
            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return settings


def load_config(path: Optional[Union[str, Path]] = None) -> Configuration:
    """
    Load and validate the configuration document.

    Args:
        path: Explicit document path (see get_config_path for the fallbacks)

    Returns:
        Validated Configuration

    Raises:
        ConfigError: Missing or malformed document, or a dangling reference
    """
    config_path = get_config_path(path)
    document = YamlFileStore(config_path).read()
    logger.debug(f"Loaded configuration from {config_path}")

    settings = get_default_settings()
    file_settings = document.get('settings') or {}
    if isinstance(file_settings, dict):
        settings = merge_configs(settings, file_settings)
    settings = apply_env_overrides(settings)

    return Configuration.from_dict(document, settings=settings, path=config_path)


def save_config(config: Configuration, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Write ``config`` back as YAML.

    Settings are written as the document declared them; defaults and
    REPOFARM_* environment overrides are never persisted.

    Returns:
        Path written to
    """
    config_path = Path(path).expanduser() if path else (config.path or get_config_path())
    document = config.to_dict()

    YamlFileStore(config_path).write(document)
    logger.info(f"Configuration saved to {config_path}")
    return config_path


def configure_logging(debug: bool = False, settings: Optional[Dict[str, Any]] = None) -> None:
    """Configure stderr logging from settings, or DEBUG when asked."""
    log_settings = (settings or get_default_settings()).get('logging', {})
    level = 'DEBUG' if debug else str(log_settings.get('level', 'WARNING')).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=log_settings.get('format', '%(levelname)s: %(message)s'),
        handlers=[
            logging.StreamHandler(sys.stderr)  # Default to stderr
        ],
        force=True,
    )

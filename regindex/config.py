#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("regindex")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


class ConfigError(Exception):
    """Configuration file could not be read."""
    pass


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REGINDEX_CONFIG environment variable
    2. ~/.regindex/config.{json,toml,yaml,yml}
    """
    if 'REGINDEX_CONFIG' in os.environ:
        return Path(os.environ['REGINDEX_CONFIG'])

    regindex_dir = Path.home() / '.regindex'
    for filename in CONFIG_FILENAMES:
        path = regindex_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return regindex_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "storage": {
            "rootdirectory": "~/.regindex",
        },
        "server": {
            "host": "127.0.0.1",
            "port": 5001,
            "cors_origins": [],
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(name)s: %(message)s",
        },
    }


def read_config_file(config_path):
    """Read a JSON, TOML or YAML config file into a dict."""
    try:
        suffix = config_path.suffix.lower()
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        else:
            # Default to JSON format
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return file_config


def load_config(config_path=None):
    """Load configuration: defaults, then the config file, then environment."""
    if config_path is None:
        config_path = get_config_path()
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

    config = get_default_config()

    if config_path.exists():
        config = merge_configs(config, read_config_file(config_path))

    return apply_env_overrides(config)


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
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REGINDEX_SECTION_KEY
    For example: REGINDEX_STORAGE_ROOTDIRECTORY=/var/lib/registry
    """
    env_prefix = "REGINDEX_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
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

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                # Path conflict: env var is longer but we found a non-dict value
                break

    return config


def configure_logging(config):
    """Configure root logging from the [logging] section."""
    log_config = config.get("logging", {})
    level = str(log_config.get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=log_config.get("format", "%(levelname)s: %(message)s"),
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )

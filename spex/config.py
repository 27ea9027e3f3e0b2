#!/usr/bin/env python3

import os
import json
from pathlib import Path
from typing import Any, Dict, Optional

import logging

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_HOST = "github.com"
DEFAULT_CACHE_DIRECTORY = "~/.cache/spex/packages"

# Project-relative locations
SPEX_DIRECTORY_NAME = ".spex"
BUILD_FILE_NAME = "spex.yml"
IMPORTS_DIRECTORY_NAME = "imports"
SPECIFICATION_ROOT_NAME = "spex"
AGENTS_FILE_NAME = "AGENTS.md"
CATALOG_SPECIFICATION_FILE_NAME = "spex-catalog.yml"
CATALOG_INDEX_FILE_NAME = "spex-catalog-index.yml"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. SPEX_CONFIG environment variable
    2. ~/.spex/ directory
    """
    # Check for environment variable override
    if 'SPEX_CONFIG' in os.environ:
        path = Path(os.environ['SPEX_CONFIG'])
        if path.exists():
            return path

    spex_dir = Path.home() / '.spex'
    for filename in ['config.yaml', 'config.yml', 'config.json']:
        path = spex_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return spex_dir / 'config.yaml'


def load_config() -> Dict[str, Any]:
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix.lower() in ['.yaml', '.yml']:
                    file_config = yaml.safe_load(f) or {}
                else:
                    file_config = json.load(f)

            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            else:
                logger.warning(f"Ignoring config {config_path}: top level must be a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Save configuration to file."""
    config_path = path or get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        if config_path.suffix.lower() in ['.yaml', '.yml']:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "general": {
            "default_host": DEFAULT_PACKAGE_HOST,
            "cache_directory": DEFAULT_CACHE_DIRECTORY,
        },
        "git": {
            "executable": "git",
            "timeout_seconds": 600,
        },
        "catalog": {
            # Empty means ./spex-catalog-index.yml
            "index_path": "",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s",
        },
    }


def get_cache_directory(config: Dict[str, Any]) -> Path:
    """Resolve the mirror cache root from configuration."""
    raw = config.get("general", {}).get("cache_directory") or DEFAULT_CACHE_DIRECTORY
    return Path(os.path.expanduser(str(raw))).resolve()


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


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: SPEX_SECTION_KEY
    For example: SPEX_GIT_TIMEOUT_SECONDS=120
    """
    env_prefix = "SPEX_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "SPEX_CONFIG":
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
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            # If we are at the end of the env var, we have found the key to set
            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            # Otherwise, we descend into the dictionary
            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config

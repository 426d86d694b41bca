#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import logging
import sys

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("forkswarm")

ENV_PREFIX = "FORKSWARM_"
CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. FORKSWARM_CONFIG environment variable
    2. ~/.forkswarm/ directory
    """
    environ = os.environ if environ is None else environ

    # Check for environment variable override
    if environ.get('FORKSWARM_CONFIG'):
        return Path(environ['FORKSWARM_CONFIG']).expanduser()

    config_dir = Path.home() / '.forkswarm'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return config_dir / 'config.json'


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """Read a JSON, TOML or YAML config file into a dict."""
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Load configuration from file.

    Args:
        config_path: Explicit config file (defaults to get_config_path())
        environ: Environment for FORKSWARM_* overrides (defaults to os.environ)

    Returns:
        Defaults merged with the file, then with environment overrides
    """
    environ = os.environ if environ is None else environ
    config_path = Path(config_path) if config_path else get_config_path(environ)

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            file_config = read_config_file(config_path)
            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            else:
                logger.error(f"Ignoring config {config_path}: top level is not a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    return apply_env_overrides(config, environ)


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "manifest": {
            "path": ".swarm/manifest.json"
        },
        "git": {
            "remote": "origin",
            "user_name": "Swarm Coordinator",
            "user_email": "swarm@devswarm.local",
            "push": True,
            "timeout_seconds": 30
        },
        "forge": {
            "timeout_seconds": 10,
            "per_page": 100,
            "github_api_url": "https://api.github.com"
        },
        "github": {
            "token": ""
        },
        "hash": {
            "algorithms": ["sha256", "sha1", "md5"]
        },
        "logging": {
            "level": "INFO",
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


def apply_env_overrides(config, environ: Optional[Mapping[str, str]] = None):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: FORKSWARM_SECTION_KEY
    For example: FORKSWARM_GIT_PUSH=false
    """
    environ = os.environ if environ is None else environ

    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
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

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config


def configure_logging(config: Dict[str, Any], verbose: bool = False) -> None:
    """Apply the logging section to the forkswarm logger hierarchy."""
    logging_config = config.get('logging', {})
    level_name = 'DEBUG' if verbose else str(logging_config.get('level', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger.setLevel(level)
    fmt = logging_config.get('format')
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))

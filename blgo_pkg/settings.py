#!/usr/bin/env python3
"""
Settings loader for the blgo static blog generator.
Supports configuration from blgo.yml, blgo.yaml, or blgo.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional

from .errors import ConfigError


SAMPLE_CONFIG = """\
# blgo configuration file
# Command-line flags override these values.

# Directory holding _index.md and the posts
source: src

# Build settings
output: generated
templates: templates
assets: null

# Markdown
highlight: true

# Development settings
serve: null       # e.g. localhost:8080
watch: false
log_dir: null
"""


class BlgoSettings:
    """Load and manage blgo configuration settings."""

    DEFAULT_SETTINGS = {
        'source': 'src',
        'output': 'generated',
        'templates': 'templates',
        'assets': None,
        'serve': None,
        'watch': False,
        'highlight': True,
        'log_dir': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['blgo.yml', 'blgo.yaml', 'blgo.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings

        Raises:
            ConfigError: if the file exists but cannot be read or parsed
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            unknown = sorted(set(loaded_settings) - set(self.DEFAULT_SETTINGS))
            if unknown:
                raise ConfigError(f"unknown settings: {', '.join(unknown)}", config_file)
            self.settings.update(loaded_settings)

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    loaded = yaml.safe_load(f) or {}
                else:
                    loaded = json.load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML: {e}", config_path) from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON: {e}", config_path) from e
        except OSError as e:
            raise ConfigError(f"could not read configuration: {e.strerror or e}", config_path) from e

        if not isinstance(loaded, dict):
            raise ConfigError("configuration must be a mapping", config_path)
        return loaded

    def create_sample_config(self) -> str:
        """
        Create a sample blgo.yml in the config directory.

        Returns:
            Path to created sample config file
        """
        config_path = os.path.join(self.config_dir, 'blgo.yml')
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(SAMPLE_CONFIG)
        except OSError as e:
            raise ConfigError(f"could not write configuration: {e.strerror or e}", config_path) from e
        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.
        """
        merged = self.settings.copy()
        for key, value in args_dict.items():
            if value is not None:
                merged[key] = value
        return merged

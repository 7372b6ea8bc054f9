#!/usr/bin/env python3
"""
Settings loader for Folio.
Supports configuration from folio.yml, folio.yaml or folio.json files.
"""

import os
import json
from datetime import timedelta
from typing import Any, Dict, NamedTuple, Optional

import yaml


class SiteInfo(NamedTuple):
    """Site identity used by feeds and OG images."""
    website: str
    title: str
    author: str
    desc: str = ''

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'SiteInfo':
        website = settings.get('site_url') or ''
        if website and not website.endswith('/'):
            website += '/'
        return cls(
            website=website,
            title=settings.get('site_title') or '',
            author=settings.get('author') or '',
            desc=settings.get('site_desc') or '',
        )


class FolioSettings:
    """Load and manage Folio configuration settings."""

    DEFAULT_SETTINGS = {
        'site_url': 'https://example.com/',
        'site_title': 'My Folio',
        'site_desc': 'Projects & Posts',
        'author': 'Site Author',
        'posts_per_page': 6,
        'scheduled_post_margin': 15,
        'dev_mode': False,
        'content': 'content',
        'output': 'output',
        'font_regular_url': 'https://www.1001fonts.com/download/font/ibm-plex-mono.regular.ttf',
        'font_bold_url': 'https://www.1001fonts.com/download/font/ibm-plex-mono.bold.ttf',
        'font_regular_file': None,
        'font_bold_file': None,
        'font_hosts': ['www.1001fonts.com'],
        'log_dir': 'logs',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['folio.yml', 'folio.yaml', 'folio.json']

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
        Load settings from the configuration file if one exists.

        Raises:
            ValueError: the file exists but is not valid YAML/JSON or not a mapping
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                self.settings.update(loaded_settings)
                print(f"Loaded configuration from: {os.path.relpath(config_file)}")

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
                    data = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    data = json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        return data

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        filename = f'folio.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Folio configuration\n\n")
                    f.write("# Site information\n")
                    f.write("site_url: https://example.com/\n")
                    f.write("site_title: My Folio\n")
                    f.write("site_desc: Projects & Posts\n")
                    f.write("author: Site Author\n\n")
                    f.write("# Listing\n")
                    f.write("posts_per_page: 6\n")
                    f.write("scheduled_post_margin: 15  # minutes\n\n")
                    f.write("# Build settings\n")
                    f.write("content: content\n")
                    f.write("output: output\n")
                    f.write("log_dir: logs\n\n")
                    f.write("# OG image fonts (local files take precedence over URLs)\n")
                    f.write("font_regular_url: https://www.1001fonts.com/download/font/ibm-plex-mono.regular.ttf\n")
                    f.write("font_bold_url: https://www.1001fonts.com/download/font/ibm-plex-mono.bold.ttf\n")
                    f.write("# font_regular_file: fonts/IBMPlexMono-Regular.ttf\n")
                    f.write("# font_bold_file: fonts/IBMPlexMono-SemiBold.ttf\n")
                elif file_format == 'json':
                    sample = {k: v for k, v in self.DEFAULT_SETTINGS.items() if v is not None}
                    json.dump(sample, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")

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


def scheduled_margin(settings: Dict[str, Any]) -> timedelta:
    """The scheduled post margin setting (minutes) as a timedelta."""
    return timedelta(minutes=float(settings.get('scheduled_post_margin') or 0))

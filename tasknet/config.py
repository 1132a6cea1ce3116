"""Configuration management for task-net."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .errors import ConfigurationError
from .utils import log

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "task-net.yaml"


@dataclass
class TaskNetConfig:
    """Configuration for task-net."""

    github_repo: str = "go-task/task"
    github_api_url: str = "https://api.github.com"
    nuget_index_url: str = "https://api.nuget.org/v3/index.json"
    asset_url_template: str = (
        "https://github.com/go-task/task/releases/download/{version}/{filename}"
    )
    binary_name: str = "task"
    request_timeout: float = 30
    github_token: str | None = field(
        default_factory=lambda: os.environ.get("GITHUB_TOKEN"),
    )

    def validate(self) -> None:
        """Validate the configuration."""
        if self.request_timeout <= 0:
            msg = f"request_timeout must be positive, got {self.request_timeout}"
            raise ConfigurationError(msg)
        for placeholder in ("{version}", "{filename}"):
            if placeholder not in self.asset_url_template:
                msg = f"asset_url_template is missing {placeholder}"
                raise ConfigurationError(msg)

    @classmethod
    def load_from_file(cls, config_path: str | Path | None = None) -> TaskNetConfig:
        """Load configuration from a YAML file, falling back to defaults."""
        path = Path(config_path or DEFAULT_CONFIG_FILE)
        if not path.exists():
            if config_path:
                log(f"Configuration file not found: {path}", "warning")
            return cls()

        try:
            with open(path) as file:
                config_data = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in configuration file: {path}"
            raise ConfigurationError(msg, str(e)) from e
        except OSError as e:
            msg = f"Could not read configuration file: {path}"
            raise ConfigurationError(msg, str(e)) from e

        if not isinstance(config_data, dict):
            msg = f"Configuration file {path} must contain a mapping"
            raise ConfigurationError(msg)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_data) - known)
        if unknown:
            msg = f"Unknown configuration keys in {path}"
            raise ConfigurationError(msg, ", ".join(unknown))

        config = cls(**config_data)
        config.validate()
        log(f"Loaded configuration from {path}", "debug")
        return config

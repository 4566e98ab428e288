"""
Run configuration: one explicit settings structure, loaded from JSON and
validated before any request is made.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict

from .errors import ConfigurationError
from ..utils.validators import get_validator, validate_url


DEFAULT_CONFIG_PATH = "scraper_config.json"
DEFAULT_SITE_ORIGIN = "https://m3e-medical.com"


@dataclass
class ScrapeConfig:
    login_url: str
    email: str
    password: str
    start_url: str
    page_count: int
    file_name: str
    site_origin: str = ""  # empty = origin of login_url
    output_dir: str = "."
    request_timeout: float = 30.0
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScrapeConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            config = cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Incomplete configuration: {e}") from e
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError describing the first invalid field."""
        for name in ('login_url', 'start_url'):
            ok, error = validate_url(getattr(self, name))
            if not ok:
                raise ConfigurationError(f"{name}: {error}")

        if not isinstance(self.email, str) or not self.email.strip():
            raise ConfigurationError("email: credentials are required")
        if not isinstance(self.password, str) or not self.password.strip():
            raise ConfigurationError("password: credentials are required")

        if isinstance(self.page_count, bool) or not isinstance(self.page_count, int) or self.page_count < 1:
            raise ConfigurationError("page_count: must be a positive integer")

        if not isinstance(self.file_name, str) or not self.file_name.strip():
            raise ConfigurationError("file_name: output file name is required")

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError("request_timeout: must be positive")

        if not self.site_origin:
            self.site_origin = get_validator().extract_origin(self.login_url) or DEFAULT_SITE_ORIGIN
        else:
            ok, error = validate_url(self.site_origin)
            if not ok:
                raise ConfigurationError(f"site_origin: {error}")


def load_config(path: str = DEFAULT_CONFIG_PATH) -> ScrapeConfig:
    """
    Load and validate the run configuration from a JSON file.

    Args:
        path: Path to the JSON settings file

    Returns:
        Validated ScrapeConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {path} must contain a JSON object")
    return ScrapeConfig.from_dict(data)

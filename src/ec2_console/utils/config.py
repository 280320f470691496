#!/usr/bin/env python3
"""
utils/config.py

Simple configuration management utilities.
Provides centralized configuration loading.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ec2_console.core.constants import (
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_AWS_REGION,
    DEFAULT_REPORT_DIR,
    DEFAULT_STORAGE_FILE,
    MAX_DESCRIBE_PAGES,
    MAX_INSTANCE_RECORDS,
    READ_TIMEOUT_SECONDS,
)
from ec2_console.utils.logger import setup_logger

logger = setup_logger(__name__, "config.log")


class ConfigManager:
    """
    Simple configuration manager.

    Features:
    - YAML configuration loading
    - Environment variable override support
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize ConfigManager.

        Args:
            config_dir: Custom config directory path (defaults to
                EC2_CONSOLE_CONFIG_DIR, then PROJECT_ROOT/configs)
        """
        self.project_root = Path(__file__).parent.parent.parent.parent
        env_dir = os.environ.get("EC2_CONSOLE_CONFIG_DIR")
        self.config_dir = Path(config_dir or env_dir or (self.project_root / "configs"))

        # Try both .yml and .yaml extensions
        yml_file = self.config_dir / "settings.yml"
        yaml_file = self.config_dir / "settings.yaml"

        if yml_file.exists():
            self.settings_file = yml_file
        elif yaml_file.exists():
            self.settings_file = yaml_file
        else:
            self.settings_file = yaml_file  # Default to .yaml for error messages

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load a YAML file safely.
        """
        if not file_path.exists():
            logger.debug(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading {file_path}: {e}")
            return {}

    def load_settings(self) -> Dict[str, Any]:
        """
        Load application settings.
        """
        return self._load_yaml_file(self.settings_file)

    def get_value(
        self, key_path: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """
        Get configuration value with dot notation support and environment variable override.
        """
        # Check environment variable first
        if env_var and os.environ.get(env_var):
            return os.environ[env_var]

        # Navigate through nested dictionary
        current = self.config
        try:
            for key in key_path.split("."):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def _get_int(self, key_path: str, default: int, env_var: Optional[str] = None) -> int:
        value = self.get_value(key_path, default, env_var=env_var)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key_path}: {value!r}, using {default}")
            return default

    def get_aws_region(self) -> str:
        """Get AWS region with environment variable override support."""
        return self.get_value("aws.region", DEFAULT_AWS_REGION, env_var="AWS_REGION")

    def get_credentials_from_env(self) -> Dict[str, str]:
        """Connection parameters from the standard AWS environment variables."""
        return {
            "access_key_id": os.environ.get("AWS_ACCESS_KEY_ID", ""),
            "secret_access_key": os.environ.get("AWS_SECRET_ACCESS_KEY", ""),
            "session_token": os.environ.get("AWS_SESSION_TOKEN", ""),
            "region": self.get_aws_region(),
        }

    def get_max_records(self) -> int:
        return self._get_int("fetch.max_records", MAX_INSTANCE_RECORDS)

    def get_max_pages(self) -> int:
        return self._get_int("fetch.max_pages", MAX_DESCRIBE_PAGES)

    def get_connect_timeout(self) -> int:
        return self._get_int("timeouts.connect", CONNECT_TIMEOUT_SECONDS)

    def get_read_timeout(self) -> int:
        return self._get_int("timeouts.read", READ_TIMEOUT_SECONDS)

    def get_logging_level(self) -> str:
        """Get logging level."""
        return self.get_value("logging.level", "INFO", env_var="LOG_LEVEL")

    def get_logging_path(self) -> str:
        """Get logging file path."""
        return self.get_value("logging.path", "logs", env_var="LOG_PATH")

    def get_storage_path(self) -> Path:
        """Get the JSON file used for credential and filter persistence."""
        path = self.get_value(
            "storage.path", str(Path.home() / DEFAULT_STORAGE_FILE), env_var="EC2_CONSOLE_STORAGE"
        )
        return Path(path).expanduser()

    def get_api_base_url(self) -> str:
        """Get the optional HTTP proxy base URL."""
        return self.get_value("api.base_url", "", env_var="EC2_CONSOLE_API_URL")

    def get_api_host(self) -> str:
        return self.get_value("api.host", DEFAULT_API_HOST, env_var="EC2_CONSOLE_API_HOST")

    def get_api_port(self) -> int:
        return self._get_int("api.port", DEFAULT_API_PORT, env_var="EC2_CONSOLE_API_PORT")

    def get_report_path(self) -> str:
        """Get report output path."""
        return self.get_value("report.path", DEFAULT_REPORT_DIR)

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration as a cached property."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def reload_config(self) -> None:
        """Force reload of configuration from file."""
        if hasattr(self, "_cached_config"):
            delattr(self, "_cached_config")

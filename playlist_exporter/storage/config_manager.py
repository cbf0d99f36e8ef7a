"""
Manages loading and saving of the INI configuration file, with environment
and command-line overrides.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from playlist_exporter.exceptions import ConfigurationError
from playlist_exporter.models.config import ExportConfig

log = logging.getLogger(__name__)

# Environment variables recognised in addition to the INI file
ENV_OVERRIDES = {
    "PB_SERVER": "server",
    "PB_KEY": "private_key",
}


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path, env_file: Path | None = None):
        self.config_file_path = config_file_path
        self.env_file = env_file
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> ExportConfig:
        """
        Loads configuration from the INI file (if present), then the environment
        (including a `.env` file), then CLI overrides, and validates the result.

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            config_from_file = self.read_file_values()
        else:
            log.debug(f"No config file at '{self.config_file_path}', using environment.")

        config_from_file.update(self._get_env_overrides())

        if cli_options:
            config_from_file.update(cli_options)

        config_from_file.setdefault("server", "")
        config_from_file.setdefault("private_key", "")

        try:
            config_dir = self.config_file_path.parent
            return ExportConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def read_file_values(self) -> dict[str, Any]:
        """
        Returns the settings stored in the INI file alone, without environment
        or command-line overrides and without validation.

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: '{self.config_file_path}'"
            )
        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e
        try:
            return self._get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save.
        """
        config = configparser.ConfigParser()
        config["DEFAULT"] = {}

        defaults = ExportConfig.model_construct()
        for key in sorted(ExportConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if value is None:
                continue
            config["DEFAULT"][key] = str(value).replace("%", "%%")

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        values: dict[str, Any] = {
            "server": section.get("server", ""),
            "private_key": section.get("private_key", ""),
            "output_dir": section.get("output_dir", "download"),
            "scratch_dir": section.get("scratch_dir", "tmp"),
            "max_workers": section.getint("max_workers", 15),
            "target_format": section.get("target_format", "mp3"),
            "converter_path": section.get("converter_path", ""),
        }
        if timeout := section.get("track_timeout", "").strip():
            values["track_timeout"] = float(timeout)
        return values

    def _get_env_overrides(self) -> dict[str, str]:
        load_dotenv(self.env_file or find_dotenv(usecwd=True))
        return {
            key: value
            for env_name, key in ENV_OVERRIDES.items()
            if (value := os.getenv(env_name))
        }

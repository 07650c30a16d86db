"""
CLI Configuration

Configuration management for the fixdesc CLI.
Supports a JSON configuration file, a .env file and environment variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


# Environment variable prefix
ENV_PREFIX = "FIXDESC_"

OUTPUT_FORMATS = ("human", "json")


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"
    json_indent: int = 2


def _check_output_format(value: str) -> str:
    if value not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format {value!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
        )
    return value


def load_config_from_env() -> CLIConfig:
    """Load configuration from environment variables."""
    config = CLIConfig()

    config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", config.log_level)
    config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        config.default_output_format = _check_output_format(
            os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT", "human").lower()
        )
    if os.getenv(f"{ENV_PREFIX}JSON_INDENT"):
        config.json_indent = int(os.getenv(f"{ENV_PREFIX}JSON_INDENT", "2"))

    return config


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    config = CLIConfig()

    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)
    config.default_output_format = _check_output_format(
        data.get("default_output_format", config.default_output_format)
    )
    config.json_indent = int(data.get("json_indent", config.json_indent))

    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables (including those from a .env file) override file
    settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    load_dotenv(find_dotenv(usecwd=True))

    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / "fixdesc.json",
            Path.cwd() / ".fixdesc.json",
            Path.home() / ".config" / "fixdesc" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    env_config = load_config_from_env()

    # Env takes precedence
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = env_config.log_level
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = env_config.log_file
    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        config.default_output_format = env_config.default_output_format
    if os.getenv(f"{ENV_PREFIX}JSON_INDENT"):
        config.json_indent = env_config.json_indent

    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "log_level": "INFO",
  "log_file": null,
  "default_output_format": "human",
  "json_indent": 2
}
"""

"""
Configuration loader for jobhistory.

Loads YAML configuration files and builds configured plugins from them.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from jobhistory.date_utils import DateSymbols
from jobhistory.plugin import LoggingJobHistoryPlugin

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "jobhistory.yml"
DEFAULT_LISTENER_NAME = "JobHistory"
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

# Config key -> plugin property
MESSAGE_PROPERTIES = {
    "job_to_be_fired": "job_to_be_fired_message",
    "job_success": "job_success_message",
    "job_failed": "job_failed_message",
    "job_was_vetoed": "job_was_vetoed_message",
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, tries ~/jobhistory.yml then ./jobhistory.yml

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If config file not found
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        home_config = Path.home() / CONFIG_FILENAME
        local_config = Path.cwd() / CONFIG_FILENAME

        if home_config.exists():
            path = home_config
        elif local_config.exists():
            path = local_config
        else:
            raise FileNotFoundError(
                "No config file found. Tried:\n"
                f"  - {home_config}\n"
                f"  - {local_config}\n"
                "Use --config to specify a custom location."
            )

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing config file {path}: {e}")

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping, got {type(config).__name__}"
        )

    from jobhistory.validation import validate_config
    issues = validate_config(config)
    if issues:
        logger.warning("Configuration validation warnings:")
        for issue in issues:
            logger.warning(f"  - {issue}")

    return config


def get_history_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return the 'history' section, or an empty dict."""
    section = config.get("history") or {}
    return section if isinstance(section, dict) else {}


def get_listener_name(config: Dict[str, Any]) -> str:
    return get_history_config(config).get("name", DEFAULT_LISTENER_NAME)


def build_plugin(
    config: Dict[str, Any], logger: Optional[logging.Logger] = None
) -> LoggingJobHistoryPlugin:
    """
    Build a plugin from configuration.

    Args:
        config: Configuration dictionary
        logger: Logger to emit on (default: the 'history.logger' name, if configured)

    Returns:
        Configured, not yet initialized plugin

    Raises:
        TemplateError: If a configured template cannot be parsed
        ValueError: If date_symbols lists have the wrong length
    """
    history = get_history_config(config)

    if logger is None and history.get("logger"):
        logger = logging.getLogger(history["logger"])

    symbols = None
    if history.get("date_symbols"):
        symbols = DateSymbols.from_dict(history["date_symbols"])

    plugin = LoggingJobHistoryPlugin(logger=logger, date_symbols=symbols)

    messages = history.get("messages") or {}
    for key, prop in MESSAGE_PROPERTIES.items():
        if key in messages:
            setattr(plugin, prop, messages[key])

    return plugin


def get_logging_settings(config: Dict[str, Any]) -> Dict[str, str]:
    """Get logging level and format from config, with defaults."""
    section = config.get("logging") or {}
    if not isinstance(section, dict):
        section = {}
    return {
        "level": str(section.get("level", "INFO")).upper(),
        "format": section.get("format", DEFAULT_LOG_FORMAT),
    }

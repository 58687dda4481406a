# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Configuration validation for jobhistory.

Validates YAML configuration structure and templates, and provides helpful
error messages.
"""

import logging
from typing import Any, Dict, List

from jobhistory.date_utils import DateSymbols
from jobhistory.message_format import MessageTemplate, TemplateError
from jobhistory.plugin import ARGUMENT_COUNTS

logger = logging.getLogger(__name__)

# Valid keys per section
VALID_TOP_LEVEL_KEYS = {"history", "logging"}
VALID_HISTORY_KEYS = {"name", "logger", "messages", "date_symbols"}
VALID_LOGGING_KEYS = {"level", "format"}
VALID_DATE_SYMBOL_KEYS = set(DateSymbols.__dataclass_fields__)

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration structure and return list of warnings/errors.

    Args:
        config: Configuration dictionary loaded from YAML

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    if not isinstance(config, dict):
        return [f"Configuration must be a dictionary, got {type(config).__name__}"]

    unknown_keys = set(config.keys()) - VALID_TOP_LEVEL_KEYS
    if unknown_keys:
        issues.append(
            f"Unknown top-level config keys: {', '.join(sorted(unknown_keys))}. "
            f"Valid keys are: {', '.join(sorted(VALID_TOP_LEVEL_KEYS))}"
        )

    if "history" in config:
        issues.extend(_validate_history(config["history"]))

    if "logging" in config:
        issues.extend(_validate_logging(config["logging"]))

    return issues


def _validate_history(history: Any) -> List[str]:
    if not isinstance(history, dict):
        return [f"'history' must be a dictionary, got {type(history).__name__}"]

    issues = []

    unknown_keys = set(history.keys()) - VALID_HISTORY_KEYS
    if unknown_keys:
        issues.append(f"history: Unknown keys: {', '.join(sorted(unknown_keys))}")

    for key in ("name", "logger"):
        if key in history and not isinstance(history[key], str):
            issues.append(f"history.{key}: Must be a string")

    if "messages" in history:
        messages = history["messages"]
        if not isinstance(messages, dict):
            issues.append(
                f"history.messages: Must be a dictionary, got {type(messages).__name__}"
            )
        else:
            for kind, template in messages.items():
                issues.extend(validate_template(kind, template))

    if "date_symbols" in history:
        issues.extend(_validate_date_symbols(history["date_symbols"]))

    return issues


def validate_template(kind: str, template: Any) -> List[str]:
    """
    Validate a single message template against its event kind.

    Args:
        kind: Event kind key (e.g. "job_success")
        template: Template value from config

    Returns:
        List of validation issues for this template
    """
    path = f"history.messages.{kind}"

    if kind not in ARGUMENT_COUNTS:
        return [
            f"{path}: Unknown message kind. "
            f"Valid kinds are: {', '.join(sorted(ARGUMENT_COUNTS))}"
        ]

    if not isinstance(template, str):
        return [f"{path}: Template must be a string, got {type(template).__name__}"]

    try:
        parsed = MessageTemplate.parse(template)
    except TemplateError as e:
        return [f"{path}: {e}"]

    available = ARGUMENT_COUNTS[kind]
    if parsed.max_index >= available:
        return [
            f"{path}: References {{{parsed.max_index}}} but only "
            f"{{0}}..{{{available - 1}}} are supplied for this event"
        ]

    return []


def _validate_date_symbols(symbols: Any) -> List[str]:
    if not isinstance(symbols, dict):
        return [f"history.date_symbols: Must be a dictionary, got {type(symbols).__name__}"]

    issues = []

    unknown_keys = set(symbols.keys()) - VALID_DATE_SYMBOL_KEYS
    if unknown_keys:
        issues.append(f"history.date_symbols: Unknown keys: {', '.join(sorted(unknown_keys))}")
        return issues

    for key, value in symbols.items():
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            issues.append(f"history.date_symbols.{key}: Must be a list of strings")

    if not issues:
        try:
            DateSymbols.from_dict(symbols)
        except ValueError as e:
            issues.append(f"history.date_symbols: {e}")

    return issues


def _validate_logging(section: Any) -> List[str]:
    if not isinstance(section, dict):
        return [f"'logging' must be a dictionary, got {type(section).__name__}"]

    issues = []

    unknown_keys = set(section.keys()) - VALID_LOGGING_KEYS
    if unknown_keys:
        issues.append(f"logging: Unknown keys: {', '.join(sorted(unknown_keys))}")

    level = section.get("level")
    if level is not None and str(level).upper() not in VALID_LEVELS:
        issues.append(
            f"logging.level: Unknown level '{level}'. "
            f"Valid levels are: {', '.join(sorted(VALID_LEVELS))}"
        )

    return issues

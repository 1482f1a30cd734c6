# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Persistent preferences for PingStatus.

Preferences live in ``~/.pingstatus.conf`` under a ``default`` section, written
either as INI::

    [default]
    host = 8.8.8.8
    interval = 5

or as YAML::

    default:
      host: 8.8.8.8
      interval: 5

Values from the file only fill options left unset on the command line.
"""

import configparser
import logging
import math
import os
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.pingstatus.conf")
SECTION = "default"

_FIELD_TYPES: Dict[str, type] = {
    "host": str,
    "interval": float,
    "timeout": float,
    "ping_path": str,
    "unreachable_exit_code": int,
    "color": bool,
    "log_level": str,
    "log_file": str,
}

_DURATION_FIELDS = ("interval", "timeout")

_TRUTHY = {"true", "yes", "on", "1"}
_FALSY = {"false", "no", "off", "0"}


def _parse_bool(text: str) -> bool:
    word = text.strip().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    raise ValueError(f"'{text}' is not a boolean (use true/false, yes/no, on/off or 1/0)")


def _coerce_field(key: str, raw: Any) -> Any:
    """Convert one raw value to the type declared for ``key``."""
    wanted = _FIELD_TYPES[key]
    try:
        if wanted is bool:
            return raw if isinstance(raw, bool) else _parse_bool(str(raw))
        # YAML booleans are ints in Python; never let them pass as numbers or strings
        if isinstance(raw, bool):
            raise TypeError(f"boolean given for {key}")
        return raw if isinstance(raw, wanted) else wanted(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config field '{key}' expects {wanted.__name__}, got {raw!r}") from exc


def _collect(items: Iterable[Tuple[str, Any]], path: str) -> Dict[str, Any]:
    """Coerce the known keys of a ``default`` section and check their ranges."""
    settings: Dict[str, Any] = {}
    for key, raw in items:
        if key not in _FIELD_TYPES:
            logger.warning("Ignoring unknown key '%s' in '%s'", key, path)
            continue
        if raw is None:
            logger.debug("Key '%s' in '%s' has no value; using the default", key, path)
            continue
        settings[key] = _coerce_field(key, raw)

    if "host" in settings and not settings["host"].strip():
        raise ValueError(f"'host' in '{path}' must not be empty")
    for key in _DURATION_FIELDS:
        if key in settings and not (math.isfinite(settings[key]) and settings[key] > 0):
            raise ValueError(f"'{key}' in '{path}' must be a finite positive number of seconds")
    return settings


def load_ini_config(path: str) -> Dict[str, Any]:
    """
    Read preferences from an INI file.

    Raises:
        ValueError: If the file is unreadable, malformed, or holds a bad value
    """
    parser = configparser.ConfigParser(allow_no_value=True, delimiters=("=", ":"))
    try:
        if not parser.read(path, encoding="utf-8"):
            raise ValueError(f"Config file '{path}' could not be read")
    except configparser.Error as exc:
        raise ValueError(f"Malformed config file '{path}': {exc}") from exc

    if not parser.has_section(SECTION):
        return {}
    return _collect(parser.items(SECTION), path)


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Read preferences from a YAML file with ``yaml.safe_load``.

    Raises:
        ValueError: If the file is unreadable, not a mapping, or holds a bad value
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except OSError as exc:
        raise ValueError(f"Config file '{path}' could not be read: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in '{path}': {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ValueError(f"'{path}' must hold a mapping, not a {type(document).__name__}")
    section = document.get(SECTION) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{SECTION}' in '{path}' must be a mapping")
    return _collect(section.items(), path)


def _is_yaml_file(path: str) -> bool:
    """An INI file opens with a ``[section]`` line; everything else is read as YAML."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                text = line.strip()
                if text and text[0] not in "#;":
                    return text[0] != "["
    except OSError:
        pass
    return False


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load preferences from ``path`` (default ``~/.pingstatus.conf``).

    A missing file yields an empty dict.
    """
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        return {}
    if _is_yaml_file(path):
        logger.debug("Reading YAML preferences from %s", path)
        return load_yaml_config(path)
    logger.debug("Reading INI preferences from %s", path)
    return load_ini_config(path)

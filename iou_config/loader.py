"""
Configuration Loader (``iou_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into an ``IouConfig``.
Callers should go through ``iou_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``ConfigError`` naming the file.
* Unknown key or bad value  -> ``ConfigError``.
"""

from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from iou_config.schema import LOG_LEVELS, TOKEN_STRATEGIES, IouConfig
from iou_kernel.exceptions import ConfigError

_KNOWN_KEYS = frozenset(f.name for f in fields(IouConfig))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        ConfigError: if the file is not valid YAML, or the document is not
            a mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def parse_config(data: Mapping[str, Any], base: IouConfig | None = None) -> IouConfig:
    """
    Apply the keys of `data` on top of `base` (defaults when None).

    Raises:
        ConfigError: unknown key, or a value of the wrong type or range.
    """
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        key = sorted(unknown)[0]
        raise ConfigError(f"Unknown configuration key: {key}", key=key)

    values: dict[str, Any] = {}

    if "database_url" in data:
        url = data["database_url"]
        if not isinstance(url, str) or not url:
            raise ConfigError("database_url must be a non-empty string", key="database_url")
        values["database_url"] = url

    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}", key="log_level"
            )
        values["log_level"] = level

    if "token_strategy" in data:
        strategy = data["token_strategy"]
        if strategy not in TOKEN_STRATEGIES:
            raise ConfigError(
                f"token_strategy must be one of {', '.join(TOKEN_STRATEGIES)}",
                key="token_strategy",
            )
        values["token_strategy"] = strategy

    if "verify_invariants" in data:
        flag = data["verify_invariants"]
        if not isinstance(flag, bool):
            raise ConfigError("verify_invariants must be true or false", key="verify_invariants")
        values["verify_invariants"] = flag

    return replace(base or IouConfig(), **values)

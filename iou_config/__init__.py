"""
iou_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the only way the CLI obtains configuration.
    The kernel never imports this package; values are passed in explicitly.
    Nothing is logged here: configuration is resolved before logging is
    configured, so the caller logs the outcome.

Resolution order (later wins):
    1. ``IouConfig`` defaults
    2. the YAML file (explicit path, else ``iou.yaml`` in the working
       directory when present)
    3. explicit overrides, e.g. from command-line flags

Failure modes:
    - ``FileNotFoundError`` -- an explicitly named file does not exist.
    - ``ConfigError`` -- invalid YAML, unknown key, or invalid value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from iou_config.loader import load_yaml_file, parse_config
from iou_config.schema import IouConfig

DEFAULT_CONFIG_FILE = Path("iou.yaml")


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    """The file `get_active_config` reads, or None when it reads none."""
    if config_path is not None:
        return config_path
    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE
    return None


def get_active_config(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> IouConfig:
    """Resolve the configuration for this process."""
    config = IouConfig()

    path = resolve_config_path(config_path)
    if path is not None:
        config = parse_config(load_yaml_file(path), base=config)

    if overrides:
        config = parse_config(
            {k: v for k, v in overrides.items() if v is not None}, base=config
        )
    return config


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "IouConfig",
    "get_active_config",
    "load_yaml_file",
    "parse_config",
    "resolve_config_path",
]

"""
Settings Loader (``stock_config.loader``).

Responsibility
--------------
Read the ledger settings YAML file, apply environment overrides and
produce a ``LedgerSettings``.  Also writes settings back for the CLI's
``config init`` command.

Architecture position
---------------------
**Config layer** -- infrastructure.  Consumed by the CLI at startup.
Has no dependency on services or engines.

Invariants enforced
-------------------
* Unknown keys are rejected by ``parse_settings`` with ``ValueError``;
  a typo never silently falls back to a default.
* Every parsed object is a frozen ``LedgerSettings``.

Failure modes
-------------
* ``load_yaml_file``: ``FileNotFoundError`` / ``yaml.YAMLError`` propagate.
* ``load_settings``: a missing or malformed file logs a warning and
  yields defaults, so a broken settings file never blocks the ledger.
"""

from __future__ import annotations

import os
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import LedgerSettings
from stock_kernel.logging_config import get_logger

logger = get_logger("config.loader")

CONFIG_ENV_VAR = "STOCK_LEDGER_CONFIG"
DATA_FILE_ENV_VAR = "STOCK_LEDGER_DATA_FILE"
LOG_LEVEL_ENV_VAR = "STOCK_LEDGER_LOG_LEVEL"
DEFAULT_CONFIG_FILE = "stock_ledger.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: settings must be a mapping, got {type(data).__name__}")
    return data


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse a ``LedgerSettings`` from a dict.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    unknown = set(data) - LedgerSettings.field_names()
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(sorted(unknown))}")
    return LedgerSettings(**data)


def apply_env_overrides(settings: LedgerSettings, environ: dict[str, str] | None = None) -> LedgerSettings:
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    if env.get(DATA_FILE_ENV_VAR):
        overrides["data_file"] = env[DATA_FILE_ENV_VAR]
    if env.get(LOG_LEVEL_ENV_VAR):
        overrides["log_level"] = env[LOG_LEVEL_ENV_VAR].upper()
    return replace(settings, **overrides) if overrides else settings


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))


def load_settings(path: str | Path | None = None) -> LedgerSettings:
    """
    Load settings from ``path`` (or ``$STOCK_LEDGER_CONFIG``, or
    ``stock_ledger.yaml``), then apply environment overrides.

    Falls back to defaults when the file is missing or malformed.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        logger.info("settings_file_missing", extra={"path": str(config_path)})
        settings = LedgerSettings()
    else:
        try:
            settings = parse_settings(load_yaml_file(config_path))
        except (yaml.YAMLError, ValueError, TypeError, OSError) as exc:
            logger.warning("settings_file_invalid", extra={
                "path": str(config_path),
                "error_type": type(exc).__name__,
                "error": str(exc),
            })
            settings = LedgerSettings()

    return apply_env_overrides(settings)


def save_settings(settings: LedgerSettings, path: str | Path) -> Path:
    """Write ``settings`` as YAML and return the path written."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(settings), f, sort_keys=False)
    logger.info("settings_saved", extra={"path": str(target)})
    return target

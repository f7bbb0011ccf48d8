from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DefaultValues, MapperConfig

"""Config loader.

Responsibilities:
- Load the YAML mapper config
- Validate it against the bundled config_schema.json
- Apply defaults for every key left out (an absent file path means "all defaults")
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing / not JSON, or the config
            violates it (unknown keys, wrong types, unsupported version ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _defaults(raw: dict[str, Any]) -> DefaultValues:
    known = {f.name for f in fields(DefaultValues)}
    return DefaultValues(**{k: str(v) for k, v in raw.items() if k in known})


def load_config(path: Path | str | None = None) -> MapperConfig:
    if path is None:
        return MapperConfig()
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    base = MapperConfig()
    return MapperConfig(
        metadata_rows=data.get("metadata_rows", base.metadata_rows),
        schema_version=data.get("schema_version", base.schema_version),
        error_log_dir=data.get("error_log_dir", base.error_log_dir),
        defaults=_defaults(data.get("defaults") or {}),
    )

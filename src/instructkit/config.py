"""Generator configuration loading with schema validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jsonschema
import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import GeneratorConfig

DEFAULT_CONFIG_FILENAME = "instructkit.yaml"

_STRING = {"type": "string"}

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "InstructKit Generator Configuration",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "default_repository": _STRING,
        "default_account": _STRING,
        "branch": _STRING,
        "fragment_root": _STRING,
        "raw_host": _STRING,
        "hosting_suffix": _STRING,
        "docs_marker": _STRING,
        "local_hosts": {"type": "array", "items": _STRING},
        "timeout": {"type": ["number", "null"]},
        "output_filename": _STRING,
        "fragments": {
            "type": "object",
            "additionalProperties": _STRING,
        },
        "sections": {
            "type": "object",
            "additionalProperties": _STRING,
        },
    },
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> GeneratorConfig:
    """Load generator configuration, falling back to built-in defaults.

    Args:
        path: YAML configuration file, or None for defaults

    Returns:
        Validated generator configuration

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated
    """
    if path is None:
        return GeneratorConfig()

    if not path.exists():
        msg = f"Config file not found: {path}"
        raise ConfigError(msg)

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse config YAML: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read config file: {e}"
        raise ConfigError(msg) from e

    if data is None:
        data = {}

    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        msg = f"Schema validation failed: {e.message}"
        raise ConfigError(msg, details={"path": list(e.absolute_path)}) from e

    try:
        return GeneratorConfig.model_validate(
            _merge(GeneratorConfig().model_dump(), data),
        )
    except ValidationError as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e


def dump_default_config() -> str:
    """Render the built-in defaults as a commented YAML starter file."""
    body = yaml.safe_dump(
        GeneratorConfig().model_dump(),
        allow_unicode=True,
        sort_keys=False,
    )
    return f"""\
# InstructKit Generator Configuration
# ===================================
# Controls where fragments are fetched from and how they are assembled.
# Run `instructkit generate --config {DEFAULT_CONFIG_FILENAME}` to use it.
#
# default_repository / default_account: fallbacks used when the
#   repository cannot be derived from --host and --path
# fragments: paths relative to the fragment root
# sections: headings extracted from the common guidelines
# timeout: seconds per request, null waits indefinitely

{body}"""

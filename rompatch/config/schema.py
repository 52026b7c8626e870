"""Config schema validation helpers."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import jsonschema

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "srecord": {
            "type": "object",
            "properties": {
                "max_data_length": {"type": "integer", "minimum": 1, "maximum": 250},
            },
        },
        "workflow": {
            "type": "object",
            "properties": {
                "working_suffix": {"type": "string", "minLength": 1},
            },
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string"},
                "json": {"type": "boolean"},
                "file_logging": {"type": "boolean"},
                "log_dir": {"type": ["string", "null"]},
            },
        },
    },
}


def validate_config_schema(config_data: Dict[str, Any],
                           schema: Optional[Dict[str, Any]] = None) -> Tuple[bool, Optional[str]]:
    try:
        jsonschema.validate(instance=config_data, schema=schema or CONFIG_SCHEMA)
        return True, None
    except jsonschema.ValidationError as exc:
        return False, exc.message

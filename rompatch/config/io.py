"""Config I/O utilities."""

from __future__ import annotations

import json
import os
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError, ValidationError
from .models import RomPatchConfig, validate_config
from .schema import validate_config_schema

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ROMPATCH_CONFIG"
DEFAULT_CONFIG_NAME = "rompatch.json"


def get_config_path() -> str:
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return override
    return os.path.join(os.getcwd(), DEFAULT_CONFIG_NAME)


def load_config(config_path: Optional[str] = None, strict: bool = False) -> Dict[str, Any]:
    """Read the JSON config; a missing or unreadable file gives an empty config.

    With ``strict`` an existing file that cannot be read or is not a JSON
    object raises ConfigurationError instead of being ignored.
    """
    if config_path is None:
        config_path = get_config_path()
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        if strict:
            raise ConfigurationError(f"Could not read config {config_path}: {exc}",
                                     file_path=config_path) from exc
        logger.warning("Could not read config %s: %s", config_path, exc)
        return {}
    if not isinstance(data, dict):
        if strict:
            raise ConfigurationError(f"Config {config_path} is not a JSON object",
                                     file_path=config_path)
        logger.warning("Config %s is not a JSON object, ignoring it", config_path)
        return {}
    ok, error = validate_config_schema(data)
    if not ok:
        logger.warning("Config schema validation failed: %s", error)
    return data


def load_settings(config_path: Optional[str] = None) -> RomPatchConfig:
    """Load and validate the config into typed settings.

    An explicitly passed path must hold readable JSON.
    """
    path = config_path or get_config_path()
    data = load_config(path, strict=config_path is not None)
    try:
        return validate_config(data)
    except PydanticValidationError as exc:
        errors = exc.errors()
        field_name = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise ValidationError(
            f"Invalid configuration in {path}: {errors[0]['msg'] if errors else exc}",
            field_name=field_name,
            details={'file_path': path},
        ) from exc


def save_config(config_data: Dict[str, Any], config_path: Optional[str] = None) -> None:
    if config_path is None:
        config_path = get_config_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(dict(config_data or {}), f, indent=2)
    except OSError as exc:
        raise ConfigurationError(f"Could not save config: {exc}", file_path=config_path) from exc

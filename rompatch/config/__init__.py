"""RomPatch - Configuration Package

Loads the optional JSON config file and validates it with jsonschema and
pydantic.
"""

from .io import get_config_path, load_config, load_settings, save_config
from .models import LoggingConfig, RomPatchConfig, SRecordConfig, WorkflowConfig, validate_config
from .schema import CONFIG_SCHEMA, validate_config_schema

__all__ = [
    'CONFIG_SCHEMA',
    'LoggingConfig',
    'RomPatchConfig',
    'SRecordConfig',
    'WorkflowConfig',
    'get_config_path',
    'load_config',
    'load_settings',
    'save_config',
    'validate_config',
    'validate_config_schema',
]

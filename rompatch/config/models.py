from __future__ import annotations

from typing import Any, Dict, Optional, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..srecord.record import DEFAULT_MAX_DATA_LENGTH

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SRecordConfig(_BaseConfigModel):
    # S3 lines carry at most 250 data bytes (count byte limit minus address and checksum).
    max_data_length: int = Field(default=DEFAULT_MAX_DATA_LENGTH, ge=1, le=250)


class WorkflowConfig(_BaseConfigModel):
    working_suffix: str = ".temp"

    @field_validator("working_suffix")
    @classmethod
    def _suffix_not_empty(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("working_suffix must be a non-empty file name suffix")
        return value


class LoggingConfig(_BaseConfigModel):
    level: str = "WARNING"
    json_format: bool = Field(default=False, alias="json")
    file_logging: bool = False
    log_dir: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return upper


class RomPatchConfig(_BaseConfigModel):
    srecord: SRecordConfig = Field(default_factory=SRecordConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def validate_config(payload: Dict[str, Any]) -> RomPatchConfig:
    return cast(RomPatchConfig, RomPatchConfig.model_validate(payload or {}))

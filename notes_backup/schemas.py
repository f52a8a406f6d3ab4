"""
Run Configuration Schemas
=========================

Validated, immutable models of the run configuration file and the loader
that reads it. The file is JSON or YAML; keys use the camelCase names of the
configuration format (``logFolderName``, ``sourceFolder``, ...).

Example::

    {
        "logFolderName": "logs",
        "backupJobs": [
            {"name": "notes", "sourceFolder": "C:/Notes", "backupFolder": "D:/Backups/notes"}
        ],
        "email": {
            "from": "backups@example.com",
            "to": "admin@example.com",
            "smtpServer": "smtp.example.com",
            "smtpPort": 587,
            "useSsl": true,
            "credentialFile": "C:/Backups/smtp.cred"
        }
    }
"""

import json
import logging
from pathlib import Path, PurePath
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from .error_handling import ConfigInvalid

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class BackupJobConfig(BaseModel):
    name: str
    source_folder: Path = Field(alias="sourceFolder")
    backup_folder: Path = Field(alias="backupFolder")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Job name must not be empty")
        if any(sep in value for sep in ("/", "\\")) or value in (".", ".."):
            raise ValueError(f"Job name must be usable in file names: {value!r}")
        return value


class EmailConfig(BaseModel):
    from_address: EmailStr = Field(alias="from")
    to: EmailStr
    smtp_server: str = Field(alias="smtpServer", min_length=1)
    smtp_port: int = Field(alias="smtpPort", ge=1, le=65535)
    use_ssl: bool = Field(alias="useSsl")
    credential_file: Path = Field(alias="credentialFile")

    class Config:
        populate_by_name = True
        frozen = True


class RunConfig(BaseModel):
    log_folder_name: str = Field(alias="logFolderName")
    jobs: List[BackupJobConfig] = Field(alias="backupJobs")
    email: EmailConfig

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("log_folder_name")
    @classmethod
    def validate_log_folder_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Log folder name must not be empty")
        if PurePath(value).is_absolute():
            raise ValueError(f"Log folder name must be relative: {value}")
        return value

    @field_validator("jobs")
    @classmethod
    def validate_jobs(cls, value: List[BackupJobConfig]) -> List[BackupJobConfig]:
        if not value:
            raise ValueError("At least one backup job must be configured")

        seen = set()
        for job in value:
            key = job.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate job name: {job.name}")
            seen.add(key)
        return value


def parse_config_content(content: str, suffix: str = ".json") -> Dict[str, Any]:
    """Parse configuration text as YAML or JSON depending on file suffix."""
    try:
        if suffix.lower() in YAML_SUFFIXES:
            parsed = yaml.safe_load(content)
        else:
            parsed = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigInvalid(f"Configuration parsing error: {e}") from e

    if not isinstance(parsed, dict):
        raise ConfigInvalid("Configuration must be a mapping at the top level")
    return parsed


def validate_run_config(data: Dict[str, Any]) -> RunConfig:
    try:
        return RunConfig.model_validate(data)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            problems.append(f"{location}: {error['msg']}")
        raise ConfigInvalid("Invalid configuration: " + "; ".join(problems)) from e


def load_run_config(path: Union[str, Path]) -> RunConfig:
    """Read and validate the run configuration file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigInvalid(f"Configuration file not found: {path}")

    try:
        # utf-8-sig tolerates a BOM written by Windows editors
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigInvalid(f"Cannot read configuration file {path}: {e}") from e

    run_config = validate_run_config(parse_config_content(content, path.suffix))
    logger.debug(f"Loaded {len(run_config.jobs)} backup job(s) from {path}")
    return run_config

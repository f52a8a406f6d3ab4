from __future__ import annotations

import json
from pathlib import Path

import pytest

from notes_backup.schemas import RunConfig, validate_run_config

from helpers import RUN_DATE, config_data


@pytest.fixture
def fixed_clock():
    return lambda: RUN_DATE


@pytest.fixture
def make_run_config(tmp_path: Path):
    def _make(jobs: list[dict]) -> RunConfig:
        return validate_run_config(config_data(tmp_path, jobs))

    return _make


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(jobs: list[dict], name: str = "backup-config.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(config_data(tmp_path, jobs)), encoding="utf-8")
        return path

    return _write

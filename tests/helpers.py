from __future__ import annotations

from datetime import datetime
from pathlib import Path

RUN_DATE = datetime(2024, 3, 7, 14, 30, 0)


def email_section(credential_file: Path) -> dict:
    return {
        "from": "backups@example.com",
        "to": "admin@example.com",
        "smtpServer": "smtp.example.com",
        "smtpPort": 587,
        "useSsl": True,
        "credentialFile": str(credential_file),
    }


def config_data(tmp_path: Path, jobs: list[dict]) -> dict:
    return {
        "logFolderName": "logs",
        "backupJobs": jobs,
        "email": email_section(tmp_path / "smtp.cred"),
    }


def job_entry(tmp_path: Path, name: str, source: Path | None = None) -> dict:
    return {
        "name": name,
        "sourceFolder": str(source if source is not None else tmp_path / "src" / name),
        "backupFolder": str(tmp_path / "backup" / name),
    }


def make_source(path: Path, files: dict[str, str]) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        target = path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return path

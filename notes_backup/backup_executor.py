"""
Backup Job Runner
=================

Processes the configured backup jobs one at a time, in configuration order,
and records exactly one outcome per job. A failing job never stops the jobs
after it: every fault raised while a job runs is converted into a failed
outcome at the loop boundary.

Per job:
- Prepare the backup and log folders
- Remove a same-day archive left by an earlier run
- Zip the source folder contents into a dated archive
- Verify the archive and record its size
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Collection, List, Optional

from .archiver import Archiver, CompressionLevel, ZipArchiver
from .error_handling import (
    ArchiveNotCreated,
    CompressionFailed,
    ConfigInvalid,
    ErrorKind,
    JobError,
    SourceMissing,
    best_effort,
    classify_error,
    error_message,
)
from .job_log import FileJobLog, JobLogWriter
from .schemas import BackupJobConfig, RunConfig

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class JobOutcome:
    """Immutable result of one backup job."""
    name: str
    ok: bool
    log_file_path: Path
    archive_path: Optional[Path] = None
    size_mb: Optional[float] = None
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(cls, name: str, archive_path: Path, size_mb: float, log_file_path: Path):
        return cls(
            name=name,
            ok=True,
            log_file_path=log_file_path,
            archive_path=archive_path,
            size_mb=size_mb,
        )

    @classmethod
    def failure(cls, name: str, error_message: str, error_kind: ErrorKind,
                log_file_path: Path, archive_path: Optional[Path] = None):
        return cls(
            name=name,
            ok=False,
            log_file_path=log_file_path,
            archive_path=archive_path,
            error_message=error_message,
            error_kind=error_kind,
        )


def log_file_name(job_name: str, run_date: datetime) -> str:
    # No separator between name and date; existing log files use this scheme
    return f"backup-{job_name}{run_date.strftime('%Y-%m-%d')}.log"


def archive_file_name(job_name: str, run_date: datetime) -> str:
    return f"{job_name}-{run_date.strftime('%y-%m-%d')}.zip"


def size_in_mb(size_bytes: int) -> float:
    return round(size_bytes / BYTES_PER_MB, 2)


class BackupJobRunner:
    """Runs backup jobs sequentially with per-job failure isolation."""

    def __init__(self, archiver: Optional[Archiver] = None,
                 job_log: Optional[JobLogWriter] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 compression_level: CompressionLevel = CompressionLevel.OPTIMAL):
        self.archiver = archiver or ZipArchiver()
        self.job_log = job_log or FileJobLog(clock=clock)
        self.clock = clock
        self.compression_level = compression_level

    def _log(self, log_file_path: Path, line: str) -> None:
        """Write to the job log, ignoring any failure."""
        best_effort(self.job_log.append, log_file_path, line)

    def run(self, run_config: RunConfig, only: Optional[Collection[str]] = None,
            run_date: Optional[datetime] = None) -> List[JobOutcome]:
        """Run all configured jobs, or only the named ones, in configuration order.

        All archive and log names use the same run date, taken from the clock
        when not given.
        """
        jobs = select_jobs(run_config.jobs, only)
        if run_date is None:
            run_date = self.clock()

        logger.info(f"Running {len(jobs)} backup job(s)")
        outcomes: List[JobOutcome] = []
        for job in jobs:
            outcome = self.run_job(job, run_config.log_folder_name, run_date)
            if outcome.ok:
                logger.info(f"Job {job.name}: backup completed ({outcome.size_mb:.2f} MB)")
            else:
                logger.warning(f"Job {job.name}: backup failed: {outcome.error_message}")
            outcomes.append(outcome)
        return outcomes

    def run_job(self, job: BackupJobConfig, log_folder_name: str, run_date: datetime) -> JobOutcome:
        """Run one job. Never raises; faults become a failed outcome."""
        backup_folder = Path(job.backup_folder)
        log_folder = backup_folder / log_folder_name
        log_file_path = log_folder / log_file_name(job.name, run_date)
        archive_path: Optional[Path] = None

        try:
            backup_folder.mkdir(parents=True, exist_ok=True)
            log_folder.mkdir(parents=True, exist_ok=True)
            self._log(log_file_path, "Starting Notes backup...")

            source_folder = Path(job.source_folder)
            if not source_folder.is_dir():
                raise SourceMissing(source_folder)

            archive_path = backup_folder / archive_file_name(job.name, run_date)
            if archive_path.exists():
                archive_path.unlink()
                self._log(log_file_path, f"Removed existing archive: {archive_path}")

            self._log(log_file_path, f"Compressing {source_folder} to {archive_path}")
            self._compress(source_folder, archive_path)

            if not archive_path.is_file():
                raise ArchiveNotCreated(archive_path)

            size_mb = size_in_mb(archive_path.stat().st_size)
            self._log(log_file_path, f"Backup completed successfully: {archive_path} ({size_mb:.2f} MB)")
            return JobOutcome.success(job.name, archive_path, size_mb, log_file_path)

        except Exception as e:
            message = error_message(e)
            if not isinstance(e, JobError):
                logger.debug(f"Job {job.name}: unexpected {type(e).__name__}", exc_info=True)
            self._log(log_file_path, f"ERROR: {message}")
            return JobOutcome.failure(job.name, message, classify_error(e), log_file_path, archive_path)

    def _compress(self, source_folder: Path, archive_path: Path) -> None:
        try:
            self.archiver.compress(source_folder, archive_path, self.compression_level)
        except Exception as e:
            # Never leave a partial archive under the dated name
            best_effort(archive_path.unlink, missing_ok=True)
            raise CompressionFailed(f"Compression failed: {error_message(e)}") from e


def select_jobs(jobs: List[BackupJobConfig], only: Optional[Collection[str]] = None) -> List[BackupJobConfig]:
    """Filter jobs by name, keeping configuration order."""
    if not only:
        return list(jobs)

    wanted = {name.lower() for name in only}
    known = {job.name.lower() for job in jobs}
    unknown = sorted(wanted - known)
    if unknown:
        raise ConfigInvalid(f"Unknown backup job(s): {', '.join(unknown)}")
    return [job for job in jobs if job.name.lower() in wanted]

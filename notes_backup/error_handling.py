"""
Error Handling
==============

Error classification and exception types for the backup runner.

Per-job errors are caught by the job runner and turned into failed job
outcomes. Configuration errors abort the run before any job starts.
Notification errors are reported to the console and never change the run's
exit status.

Features:
- Error kind classification
- Exception hierarchy per failure surface (config, job, notification)
- Best-effort wrapper for secondary operations such as log writes
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Error kind classification."""
    CONFIG_INVALID = "config_invalid"
    SOURCE_MISSING = "source_missing"
    COMPRESSION_FAILED = "compression_failed"
    ARCHIVE_NOT_CREATED = "archive_not_created"
    FILESYSTEM = "filesystem"
    CREDENTIAL_NOT_FOUND = "credential_not_found"
    MAIL_SEND_FAILED = "mail_send_failed"
    UNEXPECTED = "unexpected"


class BackupError(Exception):
    """Base class for all backup runner errors."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ConfigInvalid(BackupError):
    """Configuration file is missing, malformed or fails validation."""
    kind = ErrorKind.CONFIG_INVALID


class JobError(BackupError):
    """A failure confined to a single backup job."""


class SourceMissing(JobError):
    kind = ErrorKind.SOURCE_MISSING

    def __init__(self, source_folder):
        super().__init__(f"Source folder does not exist: {source_folder}")
        self.source_folder = source_folder


class CompressionFailed(JobError):
    kind = ErrorKind.COMPRESSION_FAILED


class ArchiveNotCreated(JobError):
    kind = ErrorKind.ARCHIVE_NOT_CREATED

    def __init__(self, archive_path):
        super().__init__(f"Archive was not created: {archive_path}")
        self.archive_path = archive_path


class NotificationError(BackupError):
    """Sending the summary report failed."""


class CredentialNotFound(NotificationError):
    kind = ErrorKind.CREDENTIAL_NOT_FOUND


class MailSendFailed(NotificationError):
    kind = ErrorKind.MAIL_SEND_FAILED


def classify_error(exception: BaseException) -> ErrorKind:
    """Classify an exception into an error kind."""
    if isinstance(exception, BackupError):
        return exception.kind
    if isinstance(exception, OSError):
        return ErrorKind.FILESYSTEM
    return ErrorKind.UNEXPECTED


def error_message(exception: BaseException) -> str:
    """Human readable message for an exception, never empty."""
    if isinstance(exception, BackupError):
        return exception.message
    message = str(exception)
    return message or type(exception).__name__


def best_effort(operation: Callable[..., Any], *args, **kwargs) -> bool:
    """Run a secondary operation and discard any fault it raises.

    Returns True when the operation completed.
    """
    try:
        operation(*args, **kwargs)
        return True
    except Exception as e:
        logger.debug(f"Ignored failure in {getattr(operation, '__name__', operation)}: {e}")
        return False

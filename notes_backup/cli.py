"""
Command line entry point.

Typical usage (from cron or Task Scheduler)::

    notes-backup --config backup-config.json
    notes-backup run --config backup-config.yaml --job notes --no-email
    notes-backup store-credential --file smtp.cred --username backups@example.com

Exit codes: 0 when every job succeeded, 1 when any job failed, 2 when the
configuration is invalid and no job ran. Notification failures do not change
the exit code.
"""

import argparse
import getpass
import logging
import sys
from datetime import datetime
from typing import List, Optional

from . import __version__
from .backup_executor import BackupJobRunner, JobOutcome
from .config import Settings, get_settings
from .credentials import Credential, CredentialStore
from .error_handling import ConfigInvalid, NotificationError
from .notifier import EmailNotifier
from .report import build_report
from .schemas import RunConfig, load_run_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_JOB_FAILED = 1
EXIT_CONFIG_INVALID = 2

COMMANDS = ("run", "store-credential")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", help="Console log level (default from settings)")

    parser = argparse.ArgumentParser(
        prog="notes-backup",
        description="Archive configured folders into dated zip files and email a summary.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", parents=[common], help="Run backup jobs (default)")
    run_parser.add_argument("--config", help="Run configuration file (JSON or YAML)")
    run_parser.add_argument("--job", dest="jobs", action="append", metavar="NAME",
                            help="Run only this job; may be repeated")
    run_parser.add_argument("--no-email", action="store_true", help="Do not send the summary email")

    cred_parser = subparsers.add_parser("store-credential", parents=[common],
                                        help="Write an encrypted SMTP credential file")
    cred_parser.add_argument("--file", required=True, help="Credential file to write")
    cred_parser.add_argument("--username", required=True, help="SMTP login name")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    # "run" is the default command
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "--version")):
        argv.insert(0, "run")
    return build_parser().parse_args(argv)


def configure_logging(settings: Settings, level: Optional[str] = None) -> None:
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=settings.log_format,
        handlers=[logging.StreamHandler()],
    )


def exit_code_for(outcomes: List[JobOutcome]) -> int:
    return EXIT_OK if all(outcome.ok for outcome in outcomes) else EXIT_JOB_FAILED


def notify(notifier: EmailNotifier, subject: str, body: str) -> bool:
    """Send the report; failures are reported on the console only."""
    try:
        notifier.send(subject, body)
        return True
    except NotificationError as e:
        logger.error(f"Failed to send backup report: {e}")
    except Exception as e:
        logger.exception(f"Unexpected error while sending backup report: {e}")
    return False


def run_backups(run_config: RunConfig, runner: BackupJobRunner,
                notifier: Optional[EmailNotifier] = None,
                only: Optional[List[str]] = None,
                run_date: Optional[datetime] = None) -> int:
    """Run jobs, send the report and return the process exit code."""
    run_date = run_date or runner.clock()
    outcomes = runner.run(run_config, only=only, run_date=run_date)
    subject, body = build_report(outcomes, run_date)
    logger.info(subject)

    if notifier is not None:
        notify(notifier, subject, body)

    return exit_code_for(outcomes)


def command_run(args: argparse.Namespace, settings: Settings) -> int:
    try:
        run_config = load_run_config(args.config or settings.config_path)
        runner = BackupJobRunner()
        notifier = None if args.no_email else EmailNotifier.from_settings(run_config.email, settings)
        return run_backups(run_config, runner, notifier, only=args.jobs)
    except ConfigInvalid as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_INVALID


def command_store_credential(args: argparse.Namespace, settings: Settings) -> int:
    if not settings.credential_key:
        logger.error("NOTES_BACKUP_CREDENTIAL_KEY must be set to store a credential")
        return EXIT_CONFIG_INVALID

    password = getpass.getpass(f"SMTP password for {args.username}: ")
    CredentialStore(settings.credential_key).save_credential(
        args.file, Credential(username=args.username, password=password)
    )
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings, args.log_level)

    if args.command == "store-credential":
        return command_store_credential(args, settings)
    return command_run(args, settings)


if __name__ == "__main__":
    sys.exit(main())

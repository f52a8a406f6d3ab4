"""
Summary report for a backup run.

The report is a pure function of the job outcomes and the run date: the same
outcomes always give the same subject and body.
"""

import os
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Sequence, Tuple, Union

from .backup_executor import JobOutcome

INDENT = "   "


@dataclass(frozen=True)
class RunSummary:
    """Aggregated outcomes of one run."""
    run_date: date
    outcomes: Tuple[JobOutcome, ...]

    @property
    def ok_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed_count(self) -> int:
        return len(self.outcomes) - self.ok_count

    @property
    def overall_ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def date_text(self) -> str:
        return self.run_date.strftime("%Y-%m-%d")


def summarize(outcomes: Sequence[JobOutcome], run_date: Union[date, datetime]) -> RunSummary:
    if isinstance(run_date, datetime):
        run_date = run_date.date()
    return RunSummary(run_date=run_date, outcomes=tuple(outcomes))


def build_subject(summary: RunSummary) -> str:
    if summary.overall_ok:
        return f"Backups SUCCESSFUL ({summary.date_text}) - {summary.ok_count} jobs"
    return (
        f"Backups COMPLETED WITH FAILURES ({summary.date_text}) - "
        f"OK: {summary.ok_count}, Failed: {summary.failed_count}!"
    )


def outcome_lines(outcome: JobOutcome) -> List[str]:
    if outcome.ok:
        return [
            f"{INDENT}{outcome.name} - {outcome.size_mb:.2f} MB",
            f"{INDENT}Zip: {outcome.archive_path}",
            f"{INDENT}Log: {outcome.log_file_path}",
        ]
    return [
        f"{INDENT}{outcome.name}",
        f"{INDENT}Error: {outcome.error_message}",
        f"{INDENT}Log: {outcome.log_file_path}",
    ]


def build_body(summary: RunSummary, line_separator: str = os.linesep) -> str:
    lines = [f"Backup summary - {summary.date_text}", ""]
    for outcome in summary.outcomes:
        lines.extend(outcome_lines(outcome))
        lines.append("")
    return line_separator.join(lines)


def build_report(outcomes: Sequence[JobOutcome], run_date: Union[date, datetime]) -> Tuple[str, str]:
    """Return (subject, body) for the run."""
    summary = summarize(outcomes, run_date)
    return build_subject(summary), build_body(summary)

"""Delivery report — loss, duplication and delay for one run."""

from dataclasses import dataclass, field

from src.universe import RecordUniverse


@dataclass(frozen=True)
class DeliveryReport:
    total_input: int
    total_found: int
    unique_found: int
    duplicates: int
    loss_percent: int
    missing: int
    log_delay: str
    summary: tuple[str, ...] = field(default_factory=tuple)


def compute_report(
    total_input: int,
    total_found: int,
    universe: RecordUniverse,
    log_delay: str,
    summary=(),
) -> DeliveryReport:
    """Derive the report metrics from the final reconciliation counts.

    Loss is an integer percentage, truncated.
    """
    if total_input < 1:
        raise ValueError(f"Total input record count must be positive, got {total_input}")
    unique_found = universe.found_count()
    missing = total_input - unique_found
    return DeliveryReport(
        total_input=total_input,
        total_found=total_found,
        unique_found=unique_found,
        duplicates=total_found - unique_found,
        loss_percent=missing * 100 // total_input,
        missing=missing,
        log_delay=log_delay,
        summary=tuple(summary),
    )


def format_report_text(report: DeliveryReport) -> str:
    """Human-readable report, one metric per line."""
    lines = list(report.summary)
    lines.append(f"Total input record:  {report.total_input}")
    lines.append(f"Total record in destination:  {report.total_found}")
    lines.append(f"Unique record in destination:  {report.unique_found}")
    lines.append(f"Duplicate records:  {report.duplicates}")
    lines.append(f"Log Delay:  {report.log_delay}")
    lines.append(f"Log Loss:  {report.loss_percent} %")
    if report.missing:
        lines.append(f"Number of missing log records:  {report.missing}")
    return "\n".join(lines)

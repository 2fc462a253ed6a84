"""Output utilities for CLI commands with clear intent.

user_output routes human-readable progress to stderr; format_run_summary
renders the final run report as a rich Panel.
"""

from typing import Any

import click
from rich.panel import Panel
from rich.text import Text

from branchfleet.core.report import RunReport


def user_output(message: Any = "", nl: bool = True) -> None:
    """Output informational message for human users (always stderr)."""
    click.echo(message, nl=nl, err=True)


def format_duration(seconds: float) -> str:
    """Format seconds as e.g. '42s' or '3m 07s'."""
    total = int(round(seconds))
    minutes, secs = divmod(total, 60)
    if minutes == 0:
        return f"{secs}s"
    return f"{minutes}m {secs:02d}s"


def format_run_summary(report: RunReport, *, push: bool, duration: float) -> Panel:
    """Format final summary box with counts, failures and retry pointer.

    Args:
        report: Finalized run report
        push: Whether the run was configured to push
        duration: Total execution time in seconds

    Returns:
        Rich Panel with formatted summary
    """
    lines: list[Text] = []

    if report.has_failures:
        lines.append(Text(f"Status: {report.failed_count} branch(es) failed", style="red"))
    else:
        lines.append(Text("Status: Success", style="green"))

    lines.append(Text(f"Created: {report.created_count}"))
    if push:
        lines.append(Text(f"Pushed: {report.pushed_count}"))
    else:
        lines.append(Text("Pushed: - (run with --push to push branches)", style="dim"))
    if report.already_complete:
        lines.append(Text(f"Already complete: {len(report.already_complete)}"))
    if report.skipped:
        lines.append(Text(f"Existing local, not pushed: {len(report.skipped)}"))
    lines.append(Text(f"Duration: {format_duration(duration)}"))

    if report.has_failures:
        lines.append(Text(""))
        lines.append(Text("Failed branches:", style="red bold"))
        for branch in report.failed:
            lines.append(Text(f"  {branch}", style="red"))
        if report.failure_log is not None:
            lines.append(Text(""))
            lines.append(
                Text(f"Logged to {report.failure_log}. Re-run to retry.", style="yellow")
            )

    content = Text("\n").join(lines)
    title = "Provisioning Complete"
    if report.has_failures:
        title = "Provisioning Finished With Failures"
    return Panel(
        content,
        title=title,
        border_style="red" if report.has_failures else "green",
        padding=(1, 2),
    )

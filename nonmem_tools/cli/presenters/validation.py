from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from ...domain.services.nonmem_validator import ValidationReport

RULE_WIDTH = 60


def format_validation_report(report: ValidationReport, *, title: str | None = None) -> str:
    """Plain-text rendering of a validation report, for files and pipes."""
    lines: list[str] = []
    lines.append("=" * RULE_WIDTH)
    lines.append(title or "NONMEM DATASET VALIDATION")
    lines.append("=" * RULE_WIDTH)
    lines.append(f"Status: {'VALID' if report.valid else 'INVALID'}")
    lines.append("")
    lines.append("Summary:")
    for metric, value in report.summary_dict().items():
        lines.append(f"  {metric}: {value}")
    if report.errors:
        lines.append("")
        lines.append(f"Errors ({report.error_count()}):")
        lines.extend(f"  - {message}" for message in report.errors)
    if report.warnings:
        lines.append("")
        lines.append(f"Warnings ({report.warning_count()}):")
        lines.extend(f"  - {message}" for message in report.warnings)
    return "\n".join(lines) + "\n"


class ValidationReportPresenter:
    pass

    def __init__(self, console: Console) -> None:
        super().__init__()
        self.console = console

    def present(self, report: ValidationReport, *, title: str | None = None) -> None:
        self.console.print()
        self.console.print(self._build_summary_table(report, title=title))
        self._print_messages(report)
        self.console.print()
        if report.valid:
            self.console.print(
                f"[green]✓[/green] [bold]Dataset is valid[/bold] "
                f"({report.warning_count()} warning(s))"
            )
        else:
            self.console.print(
                f"[red]✗[/red] [bold]Dataset is invalid[/bold] "
                f"({report.error_count()} error(s), {report.warning_count()} warning(s))"
            )

    def _build_summary_table(
        self, report: ValidationReport, *, title: str | None
    ) -> Table:
        table = Table(
            title=title or "NONMEM Dataset Validation",
            show_header=True,
            header_style="bold cyan",
            border_style="bright_blue",
            title_style="bold magenta",
        )
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Value", justify="right", style="yellow")
        for metric, value in report.summary_dict().items():
            table.add_row(str(metric), str(value))
        return table

    def _print_messages(self, report: ValidationReport) -> None:
        if report.errors:
            self.console.print()
            self.console.print(f"[bold red]Errors ({report.error_count()}):[/bold red]")
            for message in report.errors:
                self.console.print(f"  [red]✗[/red] {message}")
        if report.warnings:
            self.console.print()
            self.console.print(
                f"[bold yellow]Warnings ({report.warning_count()}):[/bold yellow]"
            )
            for message in report.warnings:
                self.console.print(f"  [yellow]⚠[/yellow] {message}")

"""Validate command - Run the NONMEM dataset checklist on an exported CSV."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ...config import ConfigLoader
from ...constants import NonmemColumns
from ...domain.services.nonmem_validator import validate_nonmem_data
from ...infrastructure.io.exceptions import DataSourceError
from ...infrastructure.io.report_writer import render_report_json
from ...infrastructure.repositories.source_data_repository import read_nonmem_dataset
from ..presenters.validation import ValidationReportPresenter, format_validation_report

console = Console()


@click.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--na-string",
    help="Missing-value marker used in DATASET (default: from config, '.')",
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Report format",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file for the validation report (default: print to console)",
)
def validate_command(
    dataset: Path,
    na_string: str | None,
    report_format: str,
    output: Path | None,
) -> None:
    """Validate a NONMEM dataset.

    Checks required variables, ID type, TIME sign and ordering, EVID codes,
    dose amounts, DV/MDV consistency and dosing coverage per subject. The
    command exits with a non-zero status when any error is found.

    Examples:

    \b
        # Print the report to the console
        nonmem-tools validate STUDY001_nonmem.csv

    \b
        # JSON report for automation
        nonmem-tools validate STUDY001_nonmem.csv --format json --output qc.json
    """
    try:
        runtime_config = ConfigLoader.load()
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    marker = na_string or runtime_config.na_string

    try:
        data = read_nonmem_dataset(dataset, na_string=marker)
    except DataSourceError as exc:
        raise click.ClickException(str(exc)) from exc

    report = validate_nonmem_data(data)
    study_id = runtime_config.study_id
    if NonmemColumns.STUDY in data.columns and data[NonmemColumns.STUDY].notna().any():
        study_id = str(data[NonmemColumns.STUDY].dropna().iloc[0])

    if report_format == "json":
        rendered = render_report_json(report, study_id=study_id)
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(rendered, encoding="utf-8")
            console.print(f"[green]✓[/green] Validation report saved to {output}")
        else:
            click.echo(rendered, nl=False)
    else:
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(
                format_validation_report(report, title=f"{study_id}: {dataset.name}"),
                encoding="utf-8",
            )
            console.print(f"[green]✓[/green] Validation report saved to {output}")
        else:
            ValidationReportPresenter(console).present(
                report, title=f"{study_id}: {dataset.name}"
            )

    if not report.valid:
        raise click.ClickException(
            f"Validation failed with {report.error_count()} error(s)"
        )

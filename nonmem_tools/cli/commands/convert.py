"""Convert command - Build a NONMEM dataset from SDTM PC, EX and DM domains.

This module serves as a thin adapter between the Click CLI framework and the
application layer's ConversionUseCase. It is responsible for:
1. Parsing CLI arguments and merging them with the runtime config
2. Creating the ConvertStudyRequest
3. Calling the use case
4. Presenting the validation report
"""

from dataclasses import dataclass
from pathlib import Path
from typing import cast

import click
from rich.console import Console

from ...application.models import ConvertStudyRequest
from ...config import ConfigLoader
from ...infrastructure.container import DependencyContainer
from ..presenters.validation import ValidationReportPresenter

console = Console()

DEFAULT_OUTPUT_SUFFIX = "_nonmem.csv"


@dataclass(frozen=True)
class ConvertCommandOptions:
    study_id: str | None
    output: Path | None
    na_string: str | None
    config_file: Path | None
    poppk: bool
    json_report: Path | None
    verbose: int

    @classmethod
    def from_kwargs(cls, options: dict[str, object]) -> "ConvertCommandOptions":
        return cls(
            study_id=cast("str | None", options.get("study_id")),
            output=cast("Path | None", options.get("output")),
            na_string=cast("str | None", options.get("na_string")),
            config_file=cast("Path | None", options.get("config_file")),
            poppk=cast("bool", options["poppk"]),
            json_report=cast("Path | None", options.get("json_report")),
            verbose=cast("int", options["verbose"]),
        )


@click.command()
@click.argument("pc_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("ex_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("dm_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--study-id",
    help="Study identifier written to the STUDY column (default: from config)",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output CSV for the NONMEM dataset (default: <study_id>_nonmem.csv next to PC_FILE)",
)
@click.option(
    "--na-string",
    help="Missing-value marker in the output CSV (default: from config, '.')",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a nonmem_tools.toml config file (default: ./nonmem_tools.toml)",
)
@click.option(
    "--poppk/--no-poppk",
    default=False,
    show_default=True,
    help="Derive PopPK covariates (WTN, RACEN, TAD, DAY, BL, FIRSTOBS)",
)
@click.option(
    "--json-report",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the validation report as JSON",
)
@click.option(
    "-v", "--verbose", count=True, help="Increase verbosity level (e.g., -v, -vv)"
)
def convert_command(
    pc_file: Path,
    ex_file: Path,
    dm_file: Path,
    **options: object,
) -> None:
    """Convert SDTM PC, EX and DM domains into a NONMEM dataset.

    Domains can be CSV/TSV, SAS transport (.xpt) or SAS7BDAT files. The
    converted dataset is validated and only written when no validation
    errors are found.

    Examples:

    \b
        # Convert and write STUDY001_nonmem.csv next to pc.csv
        nonmem-tools convert pc.csv ex.csv dm.csv --study-id STUDY001

    \b
        # Population PK covariates and a JSON validation report
        nonmem-tools convert pc.xpt ex.xpt dm.xpt --poppk --json-report qc.json
    """
    command_options = ConvertCommandOptions.from_kwargs(dict(options))

    try:
        runtime_config = ConfigLoader.load(config_file=command_options.config_file)
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    study_id = command_options.study_id or runtime_config.study_id
    na_string = command_options.na_string or runtime_config.na_string
    output = command_options.output or pc_file.parent / f"{study_id}{DEFAULT_OUTPUT_SUFFIX}"

    request = ConvertStudyRequest(
        pc_path=pc_file,
        ex_path=ex_file,
        dm_path=dm_file,
        study_id=study_id,
        output_path=output,
        na_string=na_string,
        datetime_format=runtime_config.datetime_format,
        covariates=runtime_config.covariates,
        include_poppk=command_options.poppk,
        json_report_path=command_options.json_report,
    )

    console.print(f"\n[bold]Converting Study: {study_id}[/bold]")

    container = DependencyContainer(verbose=command_options.verbose, console=console)
    use_case = container.create_conversion_use_case()
    response = use_case.execute(request)

    if response.error is not None:
        raise click.ClickException(response.error)

    if response.validation_report is not None:
        presenter = ValidationReportPresenter(console)
        presenter.present(response.validation_report, title=f"{study_id} NONMEM Dataset")

    if response.report_path is not None:
        console.print(f"[bold]Validation report:[/bold] {response.report_path}")

    if not response.success:
        raise click.ClickException(
            "Validation failed; the NONMEM dataset was not written"
        )

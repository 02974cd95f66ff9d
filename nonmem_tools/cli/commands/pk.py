"""PK command - Non-compartmental PK parameters from a NONMEM dataset."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console

from ...config import ConfigLoader
from ...constants import NonmemColumns
from ...domain.entities.nonmem_dataset import EventType
from ...domain.exceptions import InsufficientDataError
from ...domain.services.pk_calculator import (
    calculate_pk_parameters,
    summarize_pk_by_subject,
)
from ...infrastructure.io.exceptions import DataSourceError
from ...infrastructure.repositories.source_data_repository import read_nonmem_dataset
from ...pandas_utils import ensure_numeric_series
from ..presenters.pk import PKPresenter

if TYPE_CHECKING:
    import pandas as pd

console = Console()


@click.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--na-string",
    help="Missing-value marker used in DATASET (default: from config, '.')",
)
@click.option(
    "--subject",
    "subject_id",
    type=int,
    help="NONMEM ID of a single subject; prints the full parameter set",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the per-subject summary as CSV",
)
def pk_command(
    dataset: Path,
    na_string: str | None,
    subject_id: int | None,
    output: Path | None,
) -> None:
    """Calculate PK parameters from a NONMEM dataset.

    Without --subject, prints Cmax, Tmax and AUC_last for every subject.
    With --subject, prints the full parameter set for that subject,
    including the terminal half-life and AUC extrapolated to infinity.

    Examples:

    \b
        nonmem-tools pk STUDY001_nonmem.csv --output pk_summary.csv

    \b
        nonmem-tools pk STUDY001_nonmem.csv --subject 3
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

    presenter = PKPresenter(console)

    if subject_id is None:
        try:
            summary = summarize_pk_by_subject(data)
        except KeyError as exc:
            raise click.ClickException(str(exc.args[0])) from exc
        presenter.present_summary(summary)
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            summary.to_csv(output, index=False, na_rep=marker)
            console.print(f"[green]✓[/green] PK summary saved to {output}")
        return

    _present_subject(presenter, data, subject_id)


def _present_subject(
    presenter: PKPresenter, data: pd.DataFrame, subject_id: int
) -> None:
    required = (NonmemColumns.ID, NonmemColumns.TIME, NonmemColumns.DV, NonmemColumns.EVID)
    missing = [col for col in required if col not in data.columns]
    if missing:
        raise click.ClickException(f"Dataset is missing columns: {', '.join(missing)}")

    ids = ensure_numeric_series(data[NonmemColumns.ID])
    subject = data[ids == subject_id]
    if subject.empty:
        raise click.ClickException(f"Subject ID {subject_id} not found in dataset")

    evid = ensure_numeric_series(subject[NonmemColumns.EVID])
    observations = subject[evid == int(EventType.OBSERVATION)]
    dose = None
    if NonmemColumns.AMT in subject.columns:
        doses = subject[evid == int(EventType.DOSE)].sort_values(
            NonmemColumns.TIME, kind="mergesort"
        )
        if not doses.empty:
            dose = float(ensure_numeric_series(doses[NonmemColumns.AMT]).iloc[0])

    try:
        parameters = calculate_pk_parameters(
            observations[NonmemColumns.TIME], observations[NonmemColumns.DV], dose
        )
    except InsufficientDataError as exc:
        console.print(f"[yellow]⚠[/yellow] ID {subject_id}: {exc}")
        return

    presenter.present_parameters(subject_id, parameters)

"""QC command - BLQ, coverage, exposure and per-arm summaries for a NONMEM dataset."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ...config import ConfigLoader
from ...domain.services.pk_calculator import summarize_pk_by_subject
from ...domain.services.qc_summaries import (
    cmax_increases_across_arms,
    cmax_outliers,
    high_blq_subjects,
    summarize_blq,
    summarize_by_arm,
    summarize_pk_population,
    time_point_coverage,
)
from ...infrastructure.io.exceptions import DataSourceError
from ...infrastructure.repositories import SourceDataRepository, read_nonmem_dataset
from ..presenters.qc import QCPresenter

console = Console()


@click.command()
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--na-string",
    help="Missing-value marker used in DATASET (default: from config, '.')",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 100.0),
    help="Flag subjects above this BLQ percentage (default: from config, 50)",
)
@click.option(
    "--dm",
    "dm_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="SDTM DM domain providing ARMCD for the per-arm summary",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Write the QC tables as CSV files to this directory",
)
def qc_command(
    dataset: Path,
    na_string: str | None,
    threshold: float | None,
    dm_path: Path | None,
    output_dir: Path | None,
) -> None:
    """Summarize BLQ observations, time-point coverage and exposure.

    A BLQ observation is an observation record (EVID=0) without a DV.
    Coverage is the share of all subjects with a quantifiable
    concentration at each observation TIME. Exposure is summarized across
    subjects and Cmax values more than 3 SD from the mean are flagged.
    With --dm, or when DATASET carries ARMCD, concentrations are also
    summarized per treatment arm.

    Example:

    \b
        nonmem-tools qc STUDY001_nonmem.csv --dm dm.csv --output-dir qc/
    """
    try:
        runtime_config = ConfigLoader.load()
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    marker = na_string or runtime_config.na_string
    limit = runtime_config.blq_threshold_percent if threshold is None else threshold

    try:
        data = read_nonmem_dataset(dataset, na_string=marker)
        dm_data = SourceDataRepository().read_domain(dm_path) if dm_path else None
    except DataSourceError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        blq = summarize_blq(data)
        coverage = time_point_coverage(data)
        pk_summary = summarize_pk_by_subject(data)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0])) from exc
    flagged = high_blq_subjects(blq, threshold=limit)
    population = summarize_pk_population(pk_summary)
    outliers = cmax_outliers(pk_summary)

    arms = None
    if dm_data is not None or "ARMCD" in data.columns:
        try:
            arms = summarize_by_arm(data, dm_data)
        except KeyError as exc:
            raise click.ClickException(str(exc.args[0])) from exc

    presenter = QCPresenter(console)
    presenter.present_blq(blq, flagged, limit)
    presenter.present_coverage(coverage)
    presenter.present_pk_population(population, outliers)
    if arms is not None:
        presenter.present_arms(arms, cmax_increases_across_arms(arms))

    if output_dir:
        output_dir.mkdir(parents=True, exist_ok=True)
        blq.to_csv(output_dir / "blq_summary.csv", index=False)
        coverage.to_csv(output_dir / "time_point_coverage.csv", index=False)
        population.to_csv(output_dir / "pk_population.csv", index=False)
        outliers.to_csv(output_dir / "cmax_outliers.csv", index=False)
        if arms is not None:
            arms.to_csv(output_dir / "arm_summary.csv", index=False)
        console.print(f"[green]✓[/green] QC tables saved to {output_dir}")

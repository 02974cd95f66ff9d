from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from ...pandas_utils import is_missing_scalar

if TYPE_CHECKING:
    import pandas as pd
    from rich.console import Console


class QCPresenter:
    """Render the QC tables of the qc command."""

    def __init__(self, console: Console) -> None:
        super().__init__()
        self.console = console

    def present_blq(self, blq: pd.DataFrame, flagged: pd.DataFrame, threshold: float) -> None:
        table = self._table("BLQ Observations by Subject")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Observations", justify="right")
        table.add_column("BLQ", justify="right")
        table.add_column("BLQ %", justify="right", style="yellow")
        flagged_ids = set(flagged["ID"].tolist())
        for row in blq.itertuples(index=False):
            style = "red" if row.ID in flagged_ids else None
            table.add_row(
                str(row.ID),
                str(row.Total_obs),
                str(row.BLQ_count),
                f"{row.BLQ_percent:.1f}",
                style=style,
            )
        self.console.print()
        self.console.print(table)
        if flagged.empty:
            self.console.print(
                f"[green]✓[/green] No subject above {threshold:.1f}% BLQ"
            )
        else:
            ids = ", ".join(str(value) for value in flagged["ID"].tolist())
            self.console.print(
                f"[yellow]⚠[/yellow] {len(flagged)} subject(s) above {threshold:.1f}% BLQ: {ids}"
            )

    def present_coverage(self, coverage: pd.DataFrame) -> None:
        table = self._table("Time Point Coverage")
        table.add_column("TIME (h)", style="cyan", justify="right", no_wrap=True)
        table.add_column("Subjects", justify="right")
        table.add_column("With data", justify="right")
        table.add_column("Coverage %", justify="right", style="yellow")
        for row in coverage.itertuples(index=False):
            table.add_row(
                f"{row.TIME:g}",
                str(row.N_subjects),
                str(row.N_with_data),
                f"{row.Pct_coverage:.1f}",
            )
        self.console.print()
        self.console.print(table)

    def present_pk_population(self, population: pd.DataFrame, outliers: pd.DataFrame) -> None:
        table = self._table("PK Exposure Summary")
        table.add_column("Subjects", justify="right", style="cyan")
        table.add_column("Mean Cmax", justify="right")
        table.add_column("Cmax CV %", justify="right", style="yellow")
        table.add_column("Median Tmax (h)", justify="right")
        table.add_column("Mean AUC_last", justify="right")
        for row in population.itertuples(index=False):
            table.add_row(
                str(row.N),
                _fmt(row.Cmax_mean),
                _fmt(row.Cmax_CV, ".1f"),
                _fmt(row.Tmax_median),
                _fmt(row.AUC_mean),
            )
        self.console.print()
        self.console.print(table)
        if outliers.empty:
            self.console.print("[green]✓[/green] No Cmax outliers (|z| > 3)")
        else:
            listed = ", ".join(
                f"{row.ID} (z={row.z_score:.2f})" for row in outliers.itertuples(index=False)
            )
            self.console.print(
                f"[yellow]⚠[/yellow] {len(outliers)} Cmax outlier(s): {listed}"
            )

    def present_arms(self, arms: pd.DataFrame, increasing: bool | None) -> None:
        table = self._table("Concentrations by Arm")
        table.add_column("ARMCD", style="cyan", no_wrap=True)
        table.add_column("Subjects", justify="right")
        table.add_column("Observations", justify="right")
        table.add_column("Mean", justify="right")
        table.add_column("SD", justify="right")
        table.add_column("Max", justify="right")
        table.add_column("Median Cmax", justify="right", style="yellow")
        for row in arms.itertuples(index=False):
            table.add_row(
                str(row.ARMCD),
                str(row.N_subjects),
                str(row.N_observations),
                _fmt(row.Mean_conc),
                _fmt(row.SD_conc),
                _fmt(row.Max_conc),
                _fmt(row.Median_Cmax),
            )
        self.console.print()
        self.console.print(table)
        if increasing is True:
            self.console.print("[green]✓[/green] Median Cmax increases with dose")
        elif increasing is False:
            self.console.print(
                "[yellow]⚠[/yellow] Median Cmax does not increase with dose (review recommended)"
            )

    @staticmethod
    def _table(title: str) -> Table:
        return Table(
            title=title,
            show_header=True,
            header_style="bold cyan",
            border_style="bright_blue",
            title_style="bold magenta",
        )


def _fmt(value: float, spec: str = ".2f") -> str:
    return "NA" if is_missing_scalar(value) else format(value, spec)

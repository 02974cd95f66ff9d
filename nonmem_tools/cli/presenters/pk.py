from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from ...pandas_utils import is_missing_scalar

if TYPE_CHECKING:
    import pandas as pd
    from rich.console import Console

    from ...domain.entities.pk_parameters import PKParameters

PARAMETER_LABELS = (
    ("cmax", "Cmax"),
    ("tmax", "Tmax (h)"),
    ("auc_last", "AUC last"),
    ("auc_inf", "AUC inf"),
    ("lambda_z", "Lambda z (1/h)"),
    ("t_half", "Half-life (h)"),
    ("dose", "Dose"),
    ("n_points", "Points used"),
)


def _format_number(value: object) -> str:
    if is_missing_scalar(value):
        return "NA"
    if isinstance(value, bool | int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


class PKPresenter:
    pass

    def __init__(self, console: Console) -> None:
        super().__init__()
        self.console = console

    def present_summary(self, summary: pd.DataFrame) -> None:
        table = Table(
            title="PK Summary by Subject",
            show_header=True,
            header_style="bold cyan",
            border_style="bright_blue",
            title_style="bold magenta",
        )
        for column in summary.columns:
            justify = "left" if column == "ID" else "right"
            table.add_column(str(column), justify=justify, no_wrap=True)
        for row in summary.itertuples(index=False):
            table.add_row(*(_format_number(_to_python(value)) for value in row))
        self.console.print()
        self.console.print(table)
        self.console.print(f"[dim]{len(summary)} subject(s)[/dim]")

    def present_parameters(self, subject_id: object, parameters: PKParameters) -> None:
        table = Table(
            title=f"PK Parameters: ID {subject_id}",
            show_header=True,
            header_style="bold cyan",
            border_style="bright_blue",
            title_style="bold magenta",
        )
        table.add_column("Parameter", style="cyan", no_wrap=True)
        table.add_column("Value", justify="right", style="yellow")
        values = parameters.to_dict()
        for key, label in PARAMETER_LABELS:
            table.add_row(label, _format_number(values.get(key)))
        self.console.print()
        self.console.print(table)
        if not parameters.has_terminal_phase:
            self.console.print(
                "[yellow]⚠[/yellow] Terminal phase not estimable; "
                "half-life and AUC inf not reported"
            )


def _to_python(value: object) -> object:
    if hasattr(value, "item"):
        return value.item()  # type: ignore[attr-defined]
    return value

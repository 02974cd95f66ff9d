from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class PKParameters:
    """Non-compartmental exposure metrics for one concentration-time series.

    Attributes:
        cmax: Maximum observed concentration
        tmax: Time of the first occurrence of cmax
        auc_last: Trapezoidal AUC up to the last quantifiable point
        auc_inf: AUC extrapolated to infinity, None without a terminal slope
        t_half: Terminal half-life, None without a terminal slope
        lambda_z: Terminal elimination rate constant, None when not estimable
        dose: Administered dose, echoed through
        n_points: Number of usable (time, concentration) pairs
    """

    cmax: float
    tmax: float
    auc_last: float
    auc_inf: float | None
    t_half: float | None
    lambda_z: float | None
    dose: float | None
    n_points: int

    @property
    def has_terminal_phase(self) -> bool:
        return self.lambda_z is not None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

from pathlib import Path

import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep NONMEM_* variables from the developer's shell out of the tests."""
    for name in (
        "NONMEM_STUDY_ID",
        "NONMEM_NA_STRING",
        "NONMEM_DATETIME_FORMAT",
        "NONMEM_BLQ_THRESHOLD",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sdtm_ex() -> pd.DataFrame:
    """One dose per subject; S01 dosed on day 1, S02 on day 2."""
    return pd.DataFrame(
        {
            "USUBJID": ["S01", "S02"],
            "EXSTDTC": ["2024-01-01T08:00:00", "2024-01-02T09:00:00"],
            "EXDOSE": [100.0, 200.0],
        }
    )


@pytest.fixture
def sdtm_pc() -> pd.DataFrame:
    """Concentrations; the S01 pre-dose sample at the dose instant is BLQ."""
    return pd.DataFrame(
        {
            "USUBJID": ["S01", "S01", "S01", "S01", "S01", "S02", "S02", "S02", "S02"],
            "PCDTC": [
                "2024-01-01T08:00:00",
                "2024-01-01T09:00:00",
                "2024-01-01T10:00:00",
                "2024-01-01T12:00:00",
                "2024-01-01T16:00:00",
                "2024-01-02T09:30:00",
                "2024-01-02T10:00:00",
                "2024-01-02T13:00:00",
                "2024-01-02T21:00:00",
            ],
            "PCSTRESN": [None, 15.0, 20.0, 18.0, 10.0, 5.0, 12.0, 8.0, 2.0],
            "PCTPTNUM": [0, 1, 2, 4, 8, 0.5, 1, 4, 12],
        }
    )


@pytest.fixture
def sdtm_dm() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "USUBJID": ["S01", "S02"],
            "AGE": [34, 45],
            "SEX": ["M", "F"],
            "WEIGHT": [70.0, 80.0],
            "RACE": ["WHITE", "ASIAN"],
        }
    )


@pytest.fixture
def valid_nonmem_data() -> pd.DataFrame:
    """Minimal well-formed NONMEM event table for two subjects."""
    return pd.DataFrame(
        {
            "ID": [1, 1, 1, 1, 2, 2, 2, 2],
            "TIME": [0.0, 1.0, 2.0, 4.0, 0.0, 1.0, 2.0, 4.0],
            "AMT": [100.0, 0.0, 0.0, 0.0, 200.0, 0.0, 0.0, 0.0],
            "DV": [None, 15.0, 20.0, 10.0, None, 30.0, 25.0, None],
            "EVID": [1, 0, 0, 0, 1, 0, 0, 0],
            "CMT": [1, 2, 2, 2, 1, 2, 2, 2],
            "MDV": [1, 0, 0, 0, 1, 0, 0, 1],
        }
    )


@pytest.fixture
def sdtm_csv_files(
    tmp_path: Path,
    sdtm_pc: pd.DataFrame,
    sdtm_ex: pd.DataFrame,
    sdtm_dm: pd.DataFrame,
) -> dict[str, Path]:
    """The SDTM fixtures written as CSV, as a study team would deliver them."""
    paths = {
        "PC": tmp_path / "pc.csv",
        "EX": tmp_path / "ex.csv",
        "DM": tmp_path / "dm.csv",
    }
    sdtm_pc.to_csv(paths["PC"], index=False)
    sdtm_ex.to_csv(paths["EX"], index=False)
    sdtm_dm.to_csv(paths["DM"], index=False)
    return paths

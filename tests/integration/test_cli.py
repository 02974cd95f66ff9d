"""Integration tests for CLI commands.

This module contains end-to-end tests for every CLI command, from command
invocation to the files written on disk.
"""

import json
from pathlib import Path

import pandas as pd
import pytest
from click.testing import CliRunner

from nonmem_tools.cli import app
from nonmem_tools.infrastructure.io import NonmemDatasetWriter


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """CLI runner isolated from any nonmem_tools.toml in the working directory."""
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def nonmem_csv(tmp_path: Path, valid_nonmem_data: pd.DataFrame) -> Path:
    path = tmp_path / "STUDY001_nonmem.csv"
    NonmemDatasetWriter().write(valid_nonmem_data.assign(STUDY="STUDY001"), path)
    return path


@pytest.fixture
def invalid_nonmem_csv(tmp_path: Path, valid_nonmem_data: pd.DataFrame) -> Path:
    data = valid_nonmem_data.copy()
    data.loc[4, "AMT"] = 0.0
    path = tmp_path / "invalid_nonmem.csv"
    NonmemDatasetWriter().write(data, path)
    return path


def _convert_args(files: dict[str, Path], *extra: str) -> list[str]:
    return ["convert", str(files["PC"]), str(files["EX"]), str(files["DM"]), *extra]


@pytest.mark.integration
class TestConvertCommand:
    """Integration tests for the convert command."""

    def test_convert_help(self, runner):
        result = runner.invoke(app, ["convert", "--help"])

        assert result.exit_code == 0
        assert "PC_FILE" in result.output
        assert "--study-id" in result.output
        assert "--poppk" in result.output

    def test_convert_writes_dataset(self, runner, sdtm_csv_files, tmp_path):
        result = runner.invoke(app, _convert_args(sdtm_csv_files, "--study-id", "STUDY001"))

        assert result.exit_code == 0, result.output
        output = tmp_path / "STUDY001_nonmem.csv"
        assert output.exists()
        assert "Dataset is valid" in result.output
        dataset = pd.read_csv(output, na_values=["."])
        assert len(dataset) == 11
        assert dataset["ID"].tolist()[:6] == [1] * 6
        assert dataset["DV"].isna().sum() == 3

    def test_convert_with_custom_output_and_marker(self, runner, sdtm_csv_files, tmp_path):
        output = tmp_path / "out" / "pk.csv"

        result = runner.invoke(
            app,
            _convert_args(sdtm_csv_files, "--output", str(output), "--na-string", "NA"),
        )

        assert result.exit_code == 0, result.output
        first_row = output.read_text().splitlines()[1]
        assert ",NA," in first_row

    def test_convert_poppk_and_json_report(self, runner, sdtm_csv_files, tmp_path):
        report = tmp_path / "qc.json"

        result = runner.invoke(
            app,
            _convert_args(
                sdtm_csv_files,
                "--study-id",
                "STUDY001",
                "--poppk",
                "--json-report",
                str(report),
            ),
        )

        assert result.exit_code == 0, result.output
        header = (tmp_path / "STUDY001_nonmem.csv").read_text().splitlines()[0]
        for column in ("WTN", "RACEN", "TAD", "DAY", "BL", "FIRSTOBS"):
            assert column in header.split(",")
        payload = json.loads(report.read_text())
        assert payload["study_id"] == "STUDY001"
        assert payload["report"]["valid"] is True

    def test_convert_uses_config_file(self, runner, sdtm_csv_files, tmp_path):
        config = tmp_path / "custom.toml"
        config.write_text('[conversion]\nstudy_id = "CFG-STUDY"\n')

        result = runner.invoke(app, _convert_args(sdtm_csv_files, "--config", str(config)))

        assert result.exit_code == 0, result.output
        assert (tmp_path / "CFG-STUDY_nonmem.csv").exists()

    def test_convert_subject_without_dose_fails(self, runner, sdtm_csv_files, tmp_path):
        ex = pd.read_csv(sdtm_csv_files["EX"])
        ex[ex["USUBJID"] == "S01"].to_csv(sdtm_csv_files["EX"], index=False)

        result = runner.invoke(app, _convert_args(sdtm_csv_files, "--study-id", "STUDY001"))

        assert result.exit_code != 0
        assert "S02" in result.output
        assert not (tmp_path / "STUDY001_nonmem.csv").exists()

    def test_convert_missing_variable_fails(self, runner, sdtm_csv_files):
        pc = pd.read_csv(sdtm_csv_files["PC"])
        pc.drop(columns=["PCTPTNUM"]).to_csv(sdtm_csv_files["PC"], index=False)

        result = runner.invoke(app, _convert_args(sdtm_csv_files))

        assert result.exit_code != 0
        assert "PCTPTNUM" in result.output

    def test_convert_invalid_dataset_is_not_written(self, runner, sdtm_csv_files, tmp_path):
        ex = pd.read_csv(sdtm_csv_files["EX"])
        ex.assign(EXDOSE=[100.0, 0.0]).to_csv(sdtm_csv_files["EX"], index=False)

        result = runner.invoke(app, _convert_args(sdtm_csv_files, "--study-id", "STUDY001"))

        assert result.exit_code == 1
        assert "Dataset is invalid" in result.output
        assert not (tmp_path / "STUDY001_nonmem.csv").exists()

    def test_convert_missing_input_file(self, runner, sdtm_csv_files, tmp_path):
        result = runner.invoke(
            app,
            [
                "convert",
                str(tmp_path / "nope.csv"),
                str(sdtm_csv_files["EX"]),
                str(sdtm_csv_files["DM"]),
            ],
        )

        assert result.exit_code == 2
        assert "does not exist" in result.output


@pytest.mark.integration
class TestValidateCommand:
    """Integration tests for the validate command."""

    def test_validate_valid_dataset(self, runner, nonmem_csv):
        result = runner.invoke(app, ["validate", str(nonmem_csv)])

        assert result.exit_code == 0, result.output
        assert "Dataset is valid" in result.output

    def test_validate_invalid_dataset(self, runner, invalid_nonmem_csv):
        result = runner.invoke(app, ["validate", str(invalid_nonmem_csv)])

        assert result.exit_code == 1
        assert "AMT > 0" in result.output
        assert "Validation failed with 1 error(s)" in result.output

    def test_validate_json_to_stdout(self, runner, nonmem_csv):
        result = runner.invoke(app, ["validate", str(nonmem_csv), "--format", "json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["study_id"] == "STUDY001"
        assert payload["report"]["error_count"] == 0

    def test_validate_text_report_file(self, runner, invalid_nonmem_csv, tmp_path):
        output = tmp_path / "reports" / "qc.txt"

        result = runner.invoke(
            app, ["validate", str(invalid_nonmem_csv), "--output", str(output)]
        )

        assert result.exit_code == 1
        text = output.read_text()
        assert "Status: INVALID" in text
        assert "Dosing records (EVID=1) must have AMT > 0" in text

    def test_validate_custom_marker(self, runner, valid_nonmem_data, tmp_path):
        path = tmp_path / "minus99.csv"
        NonmemDatasetWriter().write(valid_nonmem_data, path, na_string="-99")

        result = runner.invoke(
            app, ["validate", str(path), "--na-string", "-99", "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)["report"]["summary"]
        assert {"metric": "Missing DV values", "value": 3} in summary

    def test_validate_unparseable_file(self, runner, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "empty" in result.output


@pytest.mark.integration
class TestPKCommand:
    """Integration tests for the pk command."""

    def test_pk_summary(self, runner, nonmem_csv, tmp_path):
        output = tmp_path / "pk_summary.csv"

        result = runner.invoke(app, ["pk", str(nonmem_csv), "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert "PK Summary by Subject" in result.output
        summary = pd.read_csv(output)
        assert summary.columns.tolist() == ["ID", "n_obs", "Cmax", "Tmax", "AUC_last", "AMT"]
        assert summary["Cmax"].tolist() == [20.0, 30.0]

    def test_pk_single_subject(self, runner, nonmem_csv):
        result = runner.invoke(app, ["pk", str(nonmem_csv), "--subject", "1"])

        assert result.exit_code == 0, result.output
        assert "PK Parameters: ID 1" in result.output
        assert "Cmax" in result.output

    def test_pk_insufficient_data(self, runner, nonmem_csv):
        result = runner.invoke(app, ["pk", str(nonmem_csv), "--subject", "2"])

        assert result.exit_code == 0, result.output
        assert "Insufficient data points" in result.output

    def test_pk_unknown_subject(self, runner, nonmem_csv):
        result = runner.invoke(app, ["pk", str(nonmem_csv), "--subject", "99"])

        assert result.exit_code == 1
        assert "Subject ID 99 not found" in result.output

    def test_pk_missing_columns(self, runner, tmp_path):
        path = tmp_path / "partial.csv"
        path.write_text("ID,TIME\n1,0\n")

        result = runner.invoke(app, ["pk", str(path)])

        assert result.exit_code == 1
        assert "DV" in result.output


@pytest.mark.integration
class TestQCCommand:
    """Integration tests for the qc command."""

    def test_qc_tables(self, runner, nonmem_csv, tmp_path):
        output_dir = tmp_path / "qc"

        result = runner.invoke(
            app, ["qc", str(nonmem_csv), "--threshold", "30", "--output-dir", str(output_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "BLQ Observations by Subject" in result.output
        assert "Time Point Coverage" in result.output
        blq = pd.read_csv(output_dir / "blq_summary.csv")
        assert blq["BLQ_percent"].tolist() == [0.0, 33.3]
        coverage = pd.read_csv(output_dir / "time_point_coverage.csv")
        assert coverage["Pct_coverage"].tolist() == [100.0, 100.0, 50.0]
        population = pd.read_csv(output_dir / "pk_population.csv")
        assert population["N"].tolist() == [2]
        assert population["Cmax_mean"].tolist() == [25.0]
        assert pd.read_csv(output_dir / "cmax_outliers.csv").empty
        assert not (output_dir / "arm_summary.csv").exists()
        assert "PK Exposure Summary" in result.output

    def test_qc_threshold_from_config(self, runner, nonmem_csv, tmp_path):
        (tmp_path / "nonmem_tools.toml").write_text("[qc]\nblq_threshold_percent = 10\n")

        result = runner.invoke(app, ["qc", str(nonmem_csv)])

        assert result.exit_code == 0, result.output
        assert "above 10.0% BLQ" in result.output

    def test_qc_rejects_out_of_range_threshold(self, runner, nonmem_csv):
        result = runner.invoke(app, ["qc", str(nonmem_csv), "--threshold", "150"])

        assert result.exit_code == 2

    def test_qc_arm_summary_from_dm(self, runner, valid_nonmem_data, tmp_path):
        dataset = tmp_path / "keyed_nonmem.csv"
        NonmemDatasetWriter().write(
            valid_nonmem_data.assign(USUBJID=["S01"] * 4 + ["S02"] * 4), dataset
        )
        dm = tmp_path / "dm.csv"
        pd.DataFrame({"USUBJID": ["S01", "S02"], "ARMCD": ["100MG", "200MG"]}).to_csv(
            dm, index=False
        )
        output_dir = tmp_path / "qc"

        result = runner.invoke(
            app, ["qc", str(dataset), "--dm", str(dm), "--output-dir", str(output_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "Concentrations by Arm" in result.output
        assert "Median Cmax increases with dose" in result.output
        arms = pd.read_csv(output_dir / "arm_summary.csv")
        assert arms["ARMCD"].tolist() == ["100MG", "200MG"]
        assert arms["Median_Cmax"].tolist() == [20.0, 30.0]

    def test_qc_dm_without_armcd_fails(self, runner, valid_nonmem_data, tmp_path):
        dataset = tmp_path / "keyed_nonmem.csv"
        NonmemDatasetWriter().write(
            valid_nonmem_data.assign(USUBJID=["S01"] * 4 + ["S02"] * 4), dataset
        )
        dm = tmp_path / "dm.csv"
        pd.DataFrame({"USUBJID": ["S01", "S02"], "AGE": [30, 40]}).to_csv(dm, index=False)

        result = runner.invoke(app, ["qc", str(dataset), "--dm", str(dm)])

        assert result.exit_code == 1
        assert "ARMCD" in result.output


@pytest.mark.integration
class TestInvalidConfiguration:
    """Every command rejects an invalid environment configuration."""

    @pytest.mark.parametrize("command", ["validate", "pk", "qc"])
    def test_out_of_range_blq_threshold(self, runner, nonmem_csv, monkeypatch, command):
        monkeypatch.setenv("NONMEM_BLQ_THRESHOLD", "150")

        result = runner.invoke(app, [command, str(nonmem_csv)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "blq_threshold_percent" in result.output

    def test_non_numeric_blq_threshold(self, runner, nonmem_csv, monkeypatch):
        monkeypatch.setenv("NONMEM_BLQ_THRESHOLD", "high")

        result = runner.invoke(app, ["qc", str(nonmem_csv)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

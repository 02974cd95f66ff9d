"""Unit tests for SDTM to NONMEM conversion."""

from __future__ import annotations

import pandas as pd
import pytest

from nonmem_tools.domain.exceptions import (
    DuplicateSubjectError,
    MissingFieldError,
    TimeOriginError,
)
from nonmem_tools.domain.services.sdtm_to_nonmem import (
    add_poppk_covariates,
    build_concentration_records,
    build_dose_records,
    convert_to_nonmem,
    create_nonmem_dataset,
)


class TestCreateNonmemDataset:
    """Tests for create_nonmem_dataset."""

    def test_row_count_is_doses_plus_observations(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert len(result) == len(sdtm_pc) + len(sdtm_ex)

    def test_mdv_flags_missing_dv(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert (result["MDV"] == result["DV"].isna().astype(int)).all()

    def test_first_dose_is_time_zero(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        doses = result[result["EVID"] == 1]
        assert (doses.groupby("ID")["TIME"].min() == 0.0).all()

    def test_time_is_hours_since_first_dose(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        s01_obs = result[(result["USUBJID"] == "S01") & (result["EVID"] == 0)]
        assert s01_obs["TIME"].tolist() == [0.0, 1.0, 2.0, 4.0, 8.0]
        s02_obs = result[(result["USUBJID"] == "S02") & (result["EVID"] == 0)]
        assert s02_obs["TIME"].tolist() == [0.5, 1.0, 4.0, 12.0]

    def test_dose_precedes_observation_at_same_time(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        first_two = result[result["ID"] == 1].head(2)
        assert first_two["TIME"].tolist() == [0.0, 0.0]
        assert first_two["EVID"].tolist() == [1, 0]

    def test_rows_sorted_and_numbered(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert result["ROW"].tolist() == list(range(1, len(result) + 1))
        for _, group in result.groupby("ID"):
            assert group["TIME"].is_monotonic_increasing

    def test_event_and_compartment_codes(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        doses = result[result["EVID"] == 1]
        observations = result[result["EVID"] == 0]
        assert (doses["CMT"] == 1).all()
        assert (doses["MDV"] == 1).all()
        assert doses["DV"].isna().all()
        assert doses["AMT"].tolist() == [100.0, 200.0]
        assert (observations["CMT"] == 2).all()
        assert (observations["AMT"] == 0).all()

    def test_covariates_and_identifiers(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        per_subject = result.drop_duplicates("ID").set_index("USUBJID")
        assert per_subject.loc["S01", "SEXN"] == 1
        assert per_subject.loc["S02", "SEXN"] == 2
        assert per_subject.loc["S02", "AGE"] == 45
        assert per_subject.loc["S01", "WEIGHT"] == 70.0
        assert (result["STUDY"] == "STUDY001").all()

    def test_column_order(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert list(result.columns) == [
            "ID",
            "TIME",
            "AMT",
            "DV",
            "EVID",
            "CMT",
            "MDV",
            "AGE",
            "SEXN",
            "WEIGHT",
            "RACE",
            "USUBJID",
            "STUDY",
            "ROW",
        ]

    def test_id_follows_first_appearance(self, sdtm_pc, sdtm_ex, sdtm_dm):
        """Subjects are numbered in the order their first event appears."""
        ex = sdtm_ex.iloc[::-1].reset_index(drop=True)

        result = create_nonmem_dataset(sdtm_pc, ex, sdtm_dm, "STUDY001")

        ids = result.drop_duplicates("USUBJID").set_index("USUBJID")["ID"]
        assert ids["S02"] == 1
        assert ids["S01"] == 2

    def test_subject_missing_from_dm_keeps_rows(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dm = sdtm_dm[sdtm_dm["USUBJID"] == "S01"]

        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, dm, "STUDY001")

        s02 = result[result["USUBJID"] == "S02"]
        assert len(s02) == 5
        assert s02["AGE"].isna().all()
        assert (s02["SEXN"] == 2).all()

    def test_sex_is_case_insensitive(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dm = sdtm_dm.assign(SEX=["m", "f"])

        result = create_nonmem_dataset(sdtm_pc, sdtm_ex, dm, "STUDY001")

        assert result.loc[result["USUBJID"] == "S01", "SEXN"].unique().tolist() == [1]

    def test_subject_without_dose_raises(self, sdtm_pc, sdtm_ex, sdtm_dm):
        ex = sdtm_ex[sdtm_ex["USUBJID"] == "S01"]

        with pytest.raises(TimeOriginError) as exc_info:
            create_nonmem_dataset(sdtm_pc, ex, sdtm_dm, "STUDY001")

        assert exc_info.value.subjects == ("S02",)

    def test_missing_pc_variable_raises(self, sdtm_pc, sdtm_ex, sdtm_dm):
        pc = sdtm_pc.drop(columns=["PCTPTNUM"])

        with pytest.raises(MissingFieldError) as exc_info:
            create_nonmem_dataset(pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert exc_info.value.domain == "PC"
        assert exc_info.value.missing == ("PCTPTNUM",)

    def test_missing_dm_variable_raises(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dm = sdtm_dm.drop(columns=["SEX", "AGE"])

        with pytest.raises(MissingFieldError, match="DM domain missing required variables"):
            create_nonmem_dataset(sdtm_pc, sdtm_ex, dm, "STUDY001")

    def test_duplicate_dm_subject_raises(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dm = pd.concat([sdtm_dm, sdtm_dm.head(1)], ignore_index=True)

        with pytest.raises(DuplicateSubjectError, match="S01"):
            create_nonmem_dataset(sdtm_pc, sdtm_ex, dm, "STUDY001")

    def test_non_dataframe_input_raises(self, sdtm_ex, sdtm_dm):
        with pytest.raises(TypeError, match="pc_data"):
            create_nonmem_dataset([], sdtm_ex, sdtm_dm, "STUDY001")  # type: ignore[arg-type]

    def test_unparseable_timestamp_gives_missing_time(self, sdtm_pc, sdtm_ex, sdtm_dm):
        pc = sdtm_pc.copy()
        pc.loc[1, "PCDTC"] = "not a date"

        result = create_nonmem_dataset(pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert result["TIME"].isna().sum() == 1
        # Missing TIME sorts last within the subject
        s01 = result[result["ID"] == 1]
        assert pd.isna(s01["TIME"].iloc[-1])

    def test_utc_offset_keeps_clock_time(self, sdtm_pc, sdtm_ex, sdtm_dm):
        pc = sdtm_pc.copy()
        pc.loc[1, "PCDTC"] = "2024-01-01T09:00:00+01:00"

        result = create_nonmem_dataset(pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert result["TIME"].notna().all()
        s01_obs = result[(result["ID"] == 1) & (result["EVID"] == 0)]
        assert s01_obs["TIME"].tolist() == [0.0, 1.0, 2.0, 4.0, 8.0]

    def test_empty_domains_give_empty_dataset(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = create_nonmem_dataset(
            sdtm_pc.iloc[0:0], sdtm_ex.iloc[0:0], sdtm_dm.iloc[0:0], "STUDY001"
        )

        assert result.empty
        assert list(result.columns[:7]) == ["ID", "TIME", "AMT", "DV", "EVID", "CMT", "MDV"]

    def test_custom_datetime_format(self, sdtm_pc, sdtm_ex, sdtm_dm):
        pc = sdtm_pc.assign(
            PCDTC=pd.to_datetime(sdtm_pc["PCDTC"]).dt.strftime("%d/%m/%Y %H:%M")
        )
        ex = sdtm_ex.assign(
            EXSTDTC=pd.to_datetime(sdtm_ex["EXSTDTC"]).dt.strftime("%d/%m/%Y %H:%M")
        )

        result = create_nonmem_dataset(
            pc, ex, sdtm_dm, "STUDY001", datetime_format="%d/%m/%Y %H:%M"
        )

        assert result.loc[result["USUBJID"] == "S02", "TIME"].max() == 12.0

    def test_inputs_are_not_mutated(self, sdtm_pc, sdtm_ex, sdtm_dm):
        before = (sdtm_pc.copy(), sdtm_ex.copy(), sdtm_dm.copy())

        create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        pd.testing.assert_frame_equal(sdtm_pc, before[0])
        pd.testing.assert_frame_equal(sdtm_ex, before[1])
        pd.testing.assert_frame_equal(sdtm_dm, before[2])


class TestConvertToNonmem:
    """Tests for convert_to_nonmem, which keeps the conversion warnings."""

    def test_clean_inputs_have_no_warnings(self, sdtm_pc, sdtm_ex, sdtm_dm):
        result = convert_to_nonmem(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        assert result.success
        assert result.warnings == []
        pd.testing.assert_frame_equal(
            result.data, create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")
        )
        assert result.metadata == {"records": 11, "subjects": 2}

    def test_timestamp_warnings_are_returned(self, sdtm_pc, sdtm_ex, sdtm_dm):
        pc = sdtm_pc.copy()
        pc.loc[1, "PCDTC"] = "not a date"
        pc.loc[2, "PCDTC"] = "2024-01-01T07:00:00"

        result = convert_to_nonmem(pc, sdtm_ex, sdtm_dm, "STUDY001")

        s01_times = result.data.loc[result.data["ID"] == 1, "TIME"].tolist()
        assert s01_times[0] == -1.0
        assert pd.isna(s01_times[-1])
        assert any("unparseable timestamps" in w for w in result.warnings)
        assert any("precede the first dose" in w for w in result.warnings)

    def test_missing_sex_is_a_warning(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dm = sdtm_dm.assign(SEX=["M", None])

        result = convert_to_nonmem(sdtm_pc, sdtm_ex, dm, "STUDY001")

        assert any("without SEX coded as SEXN=2" in w for w in result.warnings)


class TestEventRecords:
    """Tests for the dose and observation record builders."""

    def test_dose_records_coerce_amount(self, sdtm_ex):
        ex = sdtm_ex.assign(EXDOSE=["100", "n/a"])

        records = build_dose_records(ex)

        assert records["AMT"].iloc[0] == 100.0
        assert pd.isna(records["AMT"].iloc[1])
        assert records["EVID"].tolist() == [1, 1]

    def test_concentration_records_treat_blq_text_as_missing(self, sdtm_pc):
        pc = sdtm_pc.assign(PCSTRESN=["BLQ", "15", "20", "18", "10", "5", "12", "8", "2"])

        records = build_concentration_records(pc)

        assert pd.isna(records["DV"].iloc[0])
        assert records["MDV"].iloc[0] == 1
        assert records["MDV"].iloc[1:].eq(0).all()


class TestAddPopPKCovariates:
    """Tests for add_poppk_covariates."""

    def test_derives_poppk_columns(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dataset = create_nonmem_dataset(sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001")

        result = add_poppk_covariates(dataset)

        assert result.success
        for column in ("WTN", "RACEN", "TAD", "DAY", "BL", "FIRSTOBS"):
            assert column in result.data.columns
        per_subject = result.data.drop_duplicates("ID").set_index("USUBJID")
        assert per_subject.loc["S01", "WTN"] == pytest.approx(70.0 / 75.0)
        assert per_subject.loc["S02", "RACEN"] == 3

    def test_weight_taken_from_dm(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dataset = create_nonmem_dataset(
            sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001", covariates=()
        )
        assert "WEIGHT" not in dataset.columns

        result = add_poppk_covariates(dataset, sdtm_dm)

        assert "WTN" in result.data.columns
        assert "RACEN" in result.data.columns
        assert len(result.data) == len(dataset)

    def test_missing_weight_is_a_warning(self, sdtm_pc, sdtm_ex, sdtm_dm):
        dataset = create_nonmem_dataset(
            sdtm_pc, sdtm_ex, sdtm_dm, "STUDY001", covariates=()
        )

        result = add_poppk_covariates(dataset)

        assert result.success
        assert "WTN" not in result.data.columns
        assert any("WEIGHT" in warning for warning in result.warnings)

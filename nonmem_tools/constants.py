from typing import ClassVar


class Defaults:
    STUDY_ID = "STUDY"
    NA_STRING = "."
    MIN_PK_POINTS = 3
    TERMINAL_POINTS = 3
    BLQ_THRESHOLD_PERCENT = 50.0
    HOURS_PER_DAY = 24
    CONFIG_FILENAME = "nonmem_tools.toml"


class NonmemColumns:
    ID = "ID"
    TIME = "TIME"
    AMT = "AMT"
    DV = "DV"
    EVID = "EVID"
    CMT = "CMT"
    MDV = "MDV"
    AGE = "AGE"
    SEXN = "SEXN"
    USUBJID = "USUBJID"
    STUDY = "STUDY"
    ROW = "ROW"
    REQUIRED: ClassVar[tuple[str, ...]] = ("ID", "TIME", "DV", "AMT", "EVID", "CMT", "MDV")


class SourceColumns:
    USUBJID = "USUBJID"
    PCDTC = "PCDTC"
    PCSTRESN = "PCSTRESN"
    PCTPTNUM = "PCTPTNUM"
    EXSTDTC = "EXSTDTC"
    EXDOSE = "EXDOSE"
    AGE = "AGE"
    SEX = "SEX"
    WEIGHT = "WEIGHT"
    HEIGHT = "HEIGHT"
    RACE = "RACE"
    ETHNIC = "ETHNIC"
    DEFAULT_COVARIATES: ClassVar[tuple[str, ...]] = ("WEIGHT", "HEIGHT", "RACE", "ETHNIC")
    NUMERIC_COVARIATES: ClassVar[frozenset[str]] = frozenset({"AGE", "WEIGHT", "HEIGHT"})


class RaceCodes:
    MAPPING: ClassVar[dict[str, int]] = {
        "WHITE": 1,
        "BLACK OR AFRICAN AMERICAN": 2,
        "ASIAN": 3,
    }
    OTHER = 9


class MissingValues:
    STRING_MARKERS: ClassVar[frozenset[str]] = frozenset(
        {"", ".", "NAN", "<NA>", "NONE", "NULL", "NA"}
    )

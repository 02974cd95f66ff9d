from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import cast
import warnings

from .constants import Defaults, SourceColumns


@dataclass(frozen=True, slots=True)
class NonmemToolsConfig:
    study_id: str = Defaults.STUDY_ID
    na_string: str = Defaults.NA_STRING
    datetime_format: str | None = None
    covariates: tuple[str, ...] = field(
        default_factory=lambda: SourceColumns.DEFAULT_COVARIATES
    )
    blq_threshold_percent: float = Defaults.BLQ_THRESHOLD_PERCENT

    def __post_init__(self) -> None:
        if not self.study_id.strip():
            raise ValueError("study_id must not be blank")
        if not self.na_string.strip():
            raise ValueError("na_string must not be blank")
        if not 0.0 <= self.blq_threshold_percent <= 100.0:
            raise ValueError(
                f"blq_threshold_percent must be between 0 and 100, got {self.blq_threshold_percent}"
            )

    @classmethod
    def from_env(cls) -> NonmemToolsConfig:
        raw_format = os.getenv("NONMEM_DATETIME_FORMAT")
        datetime_format = raw_format.strip() if raw_format else None
        return cls(
            study_id=os.getenv("NONMEM_STUDY_ID", Defaults.STUDY_ID),
            na_string=os.getenv("NONMEM_NA_STRING", Defaults.NA_STRING),
            datetime_format=datetime_format or None,
            blq_threshold_percent=float(
                os.getenv("NONMEM_BLQ_THRESHOLD", str(Defaults.BLQ_THRESHOLD_PERCENT))
            ),
        )


class ConfigLoader:
    pass

    @staticmethod
    def load(config_file: Path | None = None) -> NonmemToolsConfig:
        config = NonmemToolsConfig.from_env()
        if config_file is None:
            config_file = Path(Defaults.CONFIG_FILENAME)
        if config_file.exists():
            try:
                config = ConfigLoader._load_from_toml(config_file, config)
            except (OSError, tomllib.TOMLDecodeError, ValueError) as e:
                warnings.warn(
                    f"Failed to load config from {config_file}: {e}", stacklevel=2
                )
        return config

    @staticmethod
    def _load_from_toml(
        config_file: Path, base_config: NonmemToolsConfig
    ) -> NonmemToolsConfig:
        with config_file.open("rb") as handle:
            data = tomllib.load(handle)
        conversion = _get_table(data, "conversion")
        qc = _get_table(data, "qc")
        study_id = base_config.study_id
        if value := conversion.get("study_id"):
            study_id = str(value)
        na_string = base_config.na_string
        if (value := conversion.get("na_string")) is not None:
            na_string = str(value)
        datetime_format = base_config.datetime_format
        if "datetime_format" in conversion:
            raw = conversion.get("datetime_format")
            cleaned = str(raw).strip() if raw is not None else ""
            datetime_format = cleaned or None
        covariates = base_config.covariates
        if (value := conversion.get("covariates")) is not None:
            covariates = _coerce_str_tuple(value, key="conversion.covariates")
        blq_threshold = base_config.blq_threshold_percent
        if (value := qc.get("blq_threshold_percent")) is not None:
            blq_threshold = _coerce_float(value, key="qc.blq_threshold_percent")
        return NonmemToolsConfig(
            study_id=study_id,
            na_string=na_string,
            datetime_format=datetime_format,
            covariates=covariates,
            blq_threshold_percent=blq_threshold,
        )


def _get_table(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    if isinstance(value, Mapping):
        return cast("Mapping[str, object]", value)
    return {}


def _coerce_float(value: object, *, key: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be numeric, got bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise ValueError(f"{key} must be numeric or string, got {type(value).__name__}")


def _coerce_str_tuple(value: object, *, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(part.strip().upper() for part in value.split(",") if part.strip())
    if isinstance(value, list):
        return tuple(str(item).strip().upper() for item in cast("list[object]", value))
    raise ValueError(f"{key} must be a list or comma separated string")

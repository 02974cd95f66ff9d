from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    import pandas as pd


@runtime_checkable
class SourceDataRepositoryPort(Protocol):
    pass

    def read_domain(self, file_path: str | Path) -> pd.DataFrame: ...

    def read_nonmem_dataset(
        self, file_path: str | Path, *, na_string: str = "."
    ) -> pd.DataFrame: ...

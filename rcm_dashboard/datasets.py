"""
The dataset collection handed to formulas and chart transforms.

Holds the parsed extracts of one client load, the names of sources that
resolved to empty because they do not exist, and the effective column
mapping (defaults overlaid with the client's columnMapping).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

import pandas as pd

from .config import DEFAULT_COLUMNS
from .loaders.extracts import LoadedExtract
from .loaders.utils import column_or_empty


@dataclass(frozen=True, eq=False)
class DatasetCollection:
    frames: Mapping[str, pd.DataFrame] = field(default_factory=dict)
    missing: frozenset[str] = frozenset()
    columns: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_COLUMNS))

    def __post_init__(self):
        object.__setattr__(self, "frames", MappingProxyType(dict(self.frames)))
        object.__setattr__(self, "columns", MappingProxyType({**DEFAULT_COLUMNS, **self.columns}))
        object.__setattr__(self, "missing", frozenset(self.missing))

    @classmethod
    def from_extracts(
        cls,
        extracts: Iterable[LoadedExtract],
        column_mapping: Mapping[str, str] | None = None,
        expected: Iterable[str] = (),
    ) -> "DatasetCollection":
        """Bundle loaded extracts; ``expected`` names with no extract count as missing."""
        extracts = list(extracts)
        loaded = {e.name for e in extracts}
        missing = {e.name for e in extracts if e.missing}
        missing.update(name for name in expected if name not in loaded)
        return cls(
            frames={e.name: e.frame for e in extracts},
            missing=frozenset(missing),
            columns=dict(column_mapping or {}),
        )

    def frame(self, name: str) -> pd.DataFrame:
        """Rows of ``name``; an empty frame when the source was not loaded."""
        return self.frames.get(name, pd.DataFrame())

    def row_count(self, name: str) -> int:
        return len(self.frame(name))

    def column(self, name: str, role: str) -> pd.Series:
        """Cells of dataset ``name`` under the header mapped to ``role``."""
        return column_or_empty(self.frame(name), self.columns[role])

    def is_missing(self, name: str) -> bool:
        return name in self.missing

"""Categorical column model with an explicit Missing variant"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import SchemaError


class MissingType:
    """The Missing category value; a singleton distinct from every label"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self):
        return (MissingType, ())


MISSING = MissingType()


def is_missing(value: Any) -> bool:
    """True for MISSING, None, NaN and pd.NA"""
    if value is MISSING or value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class CategoricalColumn:
    """
    A column of category labels with a declared level order

    ``levels`` fixes display and summation order and is never re-sorted.
    Every value is either one of ``levels`` or ``MISSING``.

    Attributes:
        name: Column name in the source table
        values: One entry per row, a level or MISSING
        levels: Ordered distinct category labels (MISSING excluded)
    """
    name: str
    values: Tuple[Any, ...]
    levels: Tuple[Any, ...]

    def __post_init__(self):
        values = tuple(MISSING if is_missing(v) else v for v in self.values)
        levels = tuple(self.levels)

        if any(is_missing(level) for level in levels):
            raise SchemaError(f"Column '{self.name}': levels may not contain a missing value",
                              column=self.name)
        if len(set(levels)) != len(levels):
            duplicates = sorted({str(l) for l in levels if levels.count(l) > 1})
            raise SchemaError(f"Column '{self.name}': duplicate levels {duplicates}",
                              column=self.name)

        known = set(levels)
        unknown = []
        for v in values:
            if v is not MISSING and v not in known and v not in unknown:
                unknown.append(v)
        if unknown:
            raise SchemaError(
                f"Column '{self.name}': values {unknown[:10]} are not among levels {list(levels)}",
                column=self.name
            )

        object.__setattr__(self, 'values', values)
        object.__setattr__(self, 'levels', levels)

    @classmethod
    def from_values(cls,
                    name: str,
                    values: Iterable[Any],
                    levels: Sequence[Any],
                    missing_labels: Sequence[Any] = ()) -> 'CategoricalColumn':
        """Build a column, mapping any of ``missing_labels`` to MISSING"""
        missing_set = set(missing_labels)
        values = [MISSING if (is_missing(v) or v in missing_set) else v for v in values]
        levels = [level for level in levels if level not in missing_set]
        return cls(name=name, values=tuple(values), levels=tuple(levels))

    @classmethod
    def from_series(cls,
                    series: pd.Series,
                    levels: Optional[Sequence[Any]] = None,
                    missing_labels: Sequence[Any] = (),
                    name: Optional[str] = None) -> 'CategoricalColumn':
        """
        Build a column from a pandas Series

        Level order comes from ``levels`` when given, otherwise from the
        categories of a pandas Categorical. Plain object columns without
        explicit levels are rejected.
        """
        name = name if name is not None else str(series.name)

        if levels is None:
            if isinstance(series.dtype, pd.CategoricalDtype):
                levels = list(series.cat.categories)
            else:
                raise SchemaError(
                    f"Column '{name}' has no declared level order; pass levels "
                    f"or supply a pandas Categorical",
                    column=name
                )

        return cls.from_values(name, series.astype(object).tolist(), levels, missing_labels)

    @property
    def row_count(self) -> int:
        return len(self.values)

    @property
    def missing_count(self) -> int:
        return sum(1 for v in self.values if v is MISSING)

    @property
    def has_missing(self) -> bool:
        return self.missing_count > 0

    @property
    def codes(self) -> np.ndarray:
        """Integer code per row: level position, or len(levels) for MISSING"""
        lookup = {level: i for i, level in enumerate(self.levels)}
        missing_code = len(self.levels)
        return np.fromiter(
            (missing_code if v is MISSING else lookup[v] for v in self.values),
            dtype=np.int64,
            count=len(self.values)
        )

    def unobserved_levels(self) -> List[Any]:
        """Levels that no row takes"""
        seen = set(v for v in self.values if v is not MISSING)
        return [level for level in self.levels if level not in seen]

    def display_levels(self, missing_label: str = "Missing",
                       include_missing: Optional[bool] = None) -> List[Any]:
        """Row labels in level order, Missing last when present"""
        if include_missing is None:
            include_missing = self.has_missing
        labels = list(self.levels)
        if include_missing:
            labels.append(missing_label)
        return labels

    def to_series(self) -> pd.Series:
        """Render as a pandas Categorical, MISSING becoming NaN"""
        data = [np.nan if v is MISSING else v for v in self.values]
        return pd.Series(pd.Categorical(data, categories=list(self.levels)), name=self.name)

    def __len__(self) -> int:
        return self.row_count

"""Input validation for totals computation"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import SchemaError, WeightTypeError
from .categorical import CategoricalColumn


class DataValidator:
    """Centralized input validation"""

    MAX_REPORTED_VALUES = 5

    @classmethod
    def require_columns(cls,
                        data: pd.DataFrame,
                        columns: Sequence[str],
                        role: str = 'column') -> None:
        """Raise SchemaError naming any column absent from the table"""
        missing_cols = [col for col in columns if col not in data.columns]
        if missing_cols:
            raise SchemaError(
                f"{role.capitalize()} column(s) {missing_cols} not found; "
                f"available columns: {list(data.columns)}",
                column=missing_cols[0]
            )

    @classmethod
    def validate_weight_column(cls, series: pd.Series, name: str) -> np.ndarray:
        """
        Convert a weight column to floats

        None/NaN cells stay NaN (absent weight). Unparseable, negative or
        infinite cells raise WeightTypeError; nothing is coerced or clamped.
        """
        if isinstance(series.dtype, pd.CategoricalDtype):
            series = series.astype(object)

        if pd.api.types.is_bool_dtype(series.dtype) or (
                series.dtype == object
                and series.map(lambda v: isinstance(v, (bool, np.bool_))).any()):
            raise WeightTypeError(
                f"Weight column '{name}' holds boolean values; expected non-negative numbers",
                column=name
            )

        absent = series.isna()
        numeric = pd.to_numeric(series, errors='coerce')

        non_numeric = numeric.isna() & ~absent
        if non_numeric.any():
            bad = series[non_numeric].unique().tolist()[:cls.MAX_REPORTED_VALUES]
            raise WeightTypeError(
                f"Weight column '{name}' has {int(non_numeric.sum())} non-numeric value(s), "
                f"e.g. {bad}; expected non-negative numbers",
                column=name
            )

        values = numeric.to_numpy(dtype=float, na_value=np.nan)

        infinite = np.isinf(values)
        if infinite.any():
            raise WeightTypeError(
                f"Weight column '{name}' has {int(infinite.sum())} infinite value(s)",
                column=name
            )

        negative = values < 0
        if negative.any():
            bad = values[negative][:cls.MAX_REPORTED_VALUES].tolist()
            raise WeightTypeError(
                f"Weight column '{name}' has {int(negative.sum())} negative value(s), "
                f"e.g. {bad}; expected >= 0",
                column=name
            )

        return values

    @classmethod
    def validate_alignment(cls,
                           columns: Sequence[CategoricalColumn],
                           row_count: int) -> None:
        """All columns of one call must share the same row count"""
        for column in columns:
            if column.row_count != row_count:
                raise SchemaError(
                    f"Column '{column.name}' has {column.row_count} rows, expected {row_count}",
                    column=column.name
                )

    @classmethod
    def check_labels(cls, column: CategoricalColumn, reserved: Sequence[str]) -> List[str]:
        """Return reserved display labels that collide with real levels"""
        levels = set(column.levels)
        return [label for label in reserved if label in levels]

    @classmethod
    def generate_validation_report(cls,
                                   data: pd.DataFrame,
                                   column: CategoricalColumn,
                                   weights: Optional[Dict[str, np.ndarray]] = None) -> Dict[str, Any]:
        """Summarise row counts, missingness and absent weights for one call"""
        weights = weights or {}
        return {
            'total_rows': len(data),
            'variable': column.name,
            'missing_rows': column.missing_count,
            'missing_rate': column.missing_count / column.row_count if column.row_count else 0.0,
            'unobserved_levels': column.unobserved_levels(),
            'absent_weights': {
                name: int(np.isnan(vector).sum()) for name, vector in weights.items()
            }
        }

"""Weight set definitions"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import SchemaError


@dataclass
class WeightSet:
    """
    Named weight vectors aligned to one set of rows

    Each vector holds one float per row; NaN marks an absent weight, which
    excludes that row from that weight's sums only.
    """
    weights: Dict[str, np.ndarray]  # weight name -> per-row weights
    row_count: int

    def __post_init__(self):
        converted = {}
        for name, vector in self.weights.items():
            vector = np.asarray(vector, dtype=float)
            if vector.ndim != 1 or len(vector) != self.row_count:
                raise SchemaError(
                    f"Weight '{name}' has {vector.size} rows, expected {self.row_count}",
                    column=name
                )
            converted[name] = vector
        self.weights = converted

    @classmethod
    def from_frame(cls, data: pd.DataFrame, columns: Sequence[str]) -> 'WeightSet':
        """Validate and extract weight columns from a DataFrame"""
        from .validators import DataValidator

        DataValidator.require_columns(data, columns, role='weight')
        weights = {
            column: DataValidator.validate_weight_column(data[column], column)
            for column in columns
        }
        return cls(weights=weights, row_count=len(data))

    @classmethod
    def unweighted(cls, row_count: int, name: str = "Unweighted") -> 'WeightSet':
        """Uniform weight of 1 per row"""
        return cls(weights={name: np.ones(row_count)}, row_count=row_count)

    @property
    def names(self) -> List[str]:
        return list(self.weights)

    def total(self, name: str) -> float:
        """Sum of the non-absent weights of one vector"""
        return float(np.nansum(self.weights[name]))

    def absent_count(self, name: str) -> int:
        return int(np.isnan(self.weights[name]).sum())

    def with_unweighted(self, name: str = "Unweighted") -> 'WeightSet':
        """Return a new set with a uniform weight placed first"""
        weights = {name: np.ones(self.row_count)}
        weights.update(self.weights)
        return WeightSet(weights=weights, row_count=self.row_count)

    def select(self, names: Optional[Sequence[str]] = None) -> 'WeightSet':
        names = self.names if names is None else list(names)
        return WeightSet(weights={n: self.weights[n] for n in names}, row_count=self.row_count)

    def __len__(self) -> int:
        return len(self.weights)

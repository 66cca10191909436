"""Weighted category sums for one or more weights"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

import numpy as np
import pandas as pd

from ..exceptions import SchemaError
from ..models.categorical import CategoricalColumn
from ..models.validators import DataValidator
from ..models.weights import WeightSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationCell:
    """One weighted sum: (category, group, weight) -> sum"""
    category: Any
    group: Any
    weight_name: str
    weighted_sum: float


@dataclass
class AggregationResult:
    """
    Weighted sums for every weight of one call

    ``sums[weight]`` is a DataFrame indexed by the primary categories (levels,
    then Missing when any primary value is missing) whose columns are the
    total label, then the grouping levels, then Missing when any grouping
    value is missing. Without grouping the total column is the only column.
    """
    variable: CategoricalColumn
    group: Optional[CategoricalColumn]
    sums: Dict[str, pd.DataFrame]  # weight name -> category x group sums
    missing_label: str = "Missing"
    total_label: str = "Total"

    @property
    def weight_names(self) -> List[str]:
        return list(self.sums)

    @property
    def row_labels(self) -> List[Any]:
        return self.variable.display_levels(self.missing_label)

    @property
    def group_labels(self) -> List[Any]:
        """Grouping columns, excluding the total column"""
        if self.group is None:
            return []
        return self.group.display_levels(self.missing_label)

    def totals(self, weight_name: str) -> pd.Series:
        """Ungrouped sums per primary category"""
        return self.sums[weight_name][self.total_label]

    def cells(self) -> Iterator[AggregationCell]:
        for weight_name, table in self.sums.items():
            for category, row in table.iterrows():
                for group, value in row.items():
                    yield AggregationCell(category, group, weight_name, float(value))


class WeightedAggregator:
    """
    Sum weights by category of a primary variable

    For each weight and each primary category (and grouping category when a
    grouping variable is supplied) the sum of that weight over matching rows.
    Absent (NaN) weights drop out of their own weight's sums only. Each
    weight is an independent pass over the rows, so weights may be summed
    concurrently; results are merged back in the caller's weight order.
    """

    def __init__(self,
                 parallel: bool = False,
                 max_workers: Optional[int] = None,
                 missing_label: str = "Missing",
                 total_label: str = "Total"):
        """
        Initialize aggregator

        Args:
            parallel: Whether to sum weights on a thread pool
            max_workers: Maximum number of parallel workers
            missing_label: Index/column label for the Missing bucket
            total_label: Column label of the all-rows group
        """
        self.parallel = parallel
        self.max_workers = max_workers
        self.missing_label = missing_label
        self.total_label = total_label

    def aggregate(self,
                  variable: CategoricalColumn,
                  weights: WeightSet,
                  group: Optional[CategoricalColumn] = None) -> AggregationResult:
        """
        Compute weighted sums per category (and group) for every weight

        Args:
            variable: Primary categorical column
            weights: Weight vectors aligned with the column rows
            group: Optional grouping categorical column

        Returns:
            AggregationResult with one sums table per weight
        """
        columns = [variable] if group is None else [variable, group]
        DataValidator.validate_alignment(columns, weights.row_count)
        if len(weights) == 0:
            raise SchemaError("At least one weight is required")

        v_codes = variable.codes
        g_codes = group.codes if group is not None else None

        if self.parallel and len(weights) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {
                    name: executor.submit(self._sum_weight, name, vector,
                                          variable, v_codes, group, g_codes)
                    for name, vector in weights.weights.items()
                }
                results = {name: future.result() for name, future in futures.items()}
        else:
            results = {
                name: self._sum_weight(name, vector, variable, v_codes, group, g_codes)
                for name, vector in weights.weights.items()
            }

        # Merge in weight order, whatever the completion order
        sums = {name: results[name] for name in weights.names}

        return AggregationResult(
            variable=variable,
            group=group,
            sums=sums,
            missing_label=self.missing_label,
            total_label=self.total_label
        )

    def _sum_weight(self,
                    name: str,
                    vector: np.ndarray,
                    variable: CategoricalColumn,
                    v_codes: np.ndarray,
                    group: Optional[CategoricalColumn],
                    g_codes: Optional[np.ndarray]) -> pd.DataFrame:
        """Sum one weight into a category x group table"""
        present = ~np.isnan(vector)
        w = vector[present]
        v = v_codes[present]

        n_rows = len(variable.levels) + 1  # levels, then Missing
        total = np.bincount(v, weights=w, minlength=n_rows)[:n_rows]
        table = {self.total_label: total.astype(float)}

        if group is not None:
            n_groups = len(group.levels) + 1
            g = g_codes[present]
            flat = np.bincount(v * n_groups + g, weights=w, minlength=n_rows * n_groups)
            grid = flat[:n_rows * n_groups].astype(float).reshape(n_rows, n_groups)
            for j, level in enumerate(group.levels):
                table[level] = grid[:, j]
            if group.has_missing:
                table[self.missing_label] = grid[:, -1]

        index = variable.display_levels(self.missing_label, include_missing=True)
        frame = pd.DataFrame(table, index=pd.Index(index, name=variable.name, dtype=object))
        if not variable.has_missing:
            frame = frame.iloc[:-1]

        logger.debug(f"Summed weight '{name}' over {int(present.sum())} of "
                     f"{len(vector)} rows for '{variable.name}'")
        return frame

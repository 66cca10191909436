"""Turn weighted sums into percent or count tables"""

import logging
import warnings
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..exceptions import EmptyInputWarning
from ..utils.config import TotalsConfig, TotalsMode
from .aggregator import AggregationResult

logger = logging.getLogger(__name__)


def round_half_up(value: float, digits: int) -> float:
    """
    Round to ``digits`` decimals, halves away from zero

    Works on the shortest repr of the float, so 0.125 rounds to 0.13 and
    2.675 to 2.68 rather than following the binary representation.
    """
    if value is None or not np.isfinite(value):
        return value
    with localcontext() as ctx:
        # Room for any float magnitude plus the requested decimals
        ctx.prec = digits + 400
        quantum = Decimal(1).scaleb(-digits)
        return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_table(table: pd.DataFrame, digits: int) -> pd.DataFrame:
    """Round every cell independently; column sums are not re-balanced"""
    if table.empty:
        return table.copy()
    return table.apply(lambda column: column.map(lambda x: round_half_up(x, digits)))


@dataclass
class TotalsResult:
    """
    Output of one totals call

    Without a grouping variable ``tables`` holds a single table whose columns
    are the weights. With grouping it holds one table per weight (the
    unweighted table first when requested) whose columns are the groups.
    """
    tables: Dict[str, pd.DataFrame]
    config: TotalsConfig
    variable: str
    group: Optional[str] = None
    title: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def table(self) -> pd.DataFrame:
        """The first (and without grouping, only) table"""
        return next(iter(self.tables.values()))

    @property
    def names(self) -> List[str]:
        return list(self.tables)

    def __getitem__(self, name: str) -> pd.DataFrame:
        return self.tables[name]

    def __len__(self) -> int:
        return len(self.tables)

    def to_records(self, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Ordered row records: the category label then one field per column"""
        table = self.table if name is None else self.tables[name]
        records = []
        for label, row in table.iterrows():
            record = {self.variable: label}
            record.update({column: float(value) for column, value in row.items()})
            records.append(record)
        return records


class TableComposer:
    """
    Normalize aggregated sums into display tables

    Percent cells divide each (category, group, weight) sum by the sum over
    the non-missing categories of the same group and weight; the Missing row
    joins that base only when ``missing_in_base`` is set, and otherwise shows
    its raw weighted sum. Each group's column sums to 100, rows never do.
    Count cells are the raw sums, unrounded.
    """

    def __init__(self, config: Optional[TotalsConfig] = None):
        self.config = config or TotalsConfig()

    def compose(self,
                aggregation: AggregationResult,
                display_names: Optional[Dict[str, str]] = None,
                title: Optional[str] = None,
                labels: Optional[Dict[str, str]] = None) -> TotalsResult:
        """
        Build the output tables

        Args:
            aggregation: Weighted sums from WeightedAggregator
            display_names: Weight name -> column/table name
            title: Optional title carried to the export collaborator
            labels: Optional per-table labels

        Returns:
            TotalsResult
        """
        display_names = display_names or {}
        estimates = {
            display_names.get(name, name): self._estimate(aggregation, sums)
            for name, sums in aggregation.sums.items()
        }

        variable = aggregation.variable
        if aggregation.group is None:
            tables = {
                self.config.total_label: self._weights_as_columns(aggregation, estimates)
            }
        else:
            tables = {
                name: self._groups_as_columns(aggregation, table)
                for name, table in estimates.items()
            }

        if self.config.mode == TotalsMode.PERCENT:
            tables = {name: round_table(table, self.config.digits)
                      for name, table in tables.items()}

        return TotalsResult(
            tables=tables,
            config=self.config,
            variable=variable.name,
            group=aggregation.group.name if aggregation.group is not None else None,
            title=title,
            labels=dict(labels or {})
        )

    def _estimate(self, aggregation: AggregationResult, sums: pd.DataFrame) -> pd.DataFrame:
        if self.config.mode == TotalsMode.COUNT:
            return sums.copy()
        return self._percentages(aggregation, sums)

    def _percentages(self, aggregation: AggregationResult, sums: pd.DataFrame) -> pd.DataFrame:
        """Percent of the (group, weight) base; pre-rounding"""
        has_missing_row = aggregation.variable.has_missing
        exclude_missing = has_missing_row and not self.config.missing_in_base

        base_rows = sums.iloc[:-1] if exclude_missing else sums
        base = base_rows.sum(axis=0)

        zero_base = base == 0
        if zero_base.any():
            empty_groups = [str(c) for c in base.index[zero_base]]
            message = (f"Percentage base is zero for '{aggregation.variable.name}' "
                       f"in column(s) {empty_groups}; cells set to 0")
            logger.warning(message)
            warnings.warn(message, EmptyInputWarning, stacklevel=3)

        percent = sums.div(base.where(~zero_base, np.nan), axis=1) * 100.0
        percent = percent.fillna(0.0)

        if exclude_missing:
            percent.iloc[-1] = sums.iloc[-1]

        return percent

    def _weights_as_columns(self,
                            aggregation: AggregationResult,
                            estimates: Dict[str, pd.DataFrame]) -> pd.DataFrame:
        total_label = aggregation.total_label
        table = pd.DataFrame(
            {name: estimate[total_label] for name, estimate in estimates.items()},
            index=pd.Index(aggregation.row_labels, name=aggregation.variable.name, dtype=object)
        )
        table.columns.name = None
        return table

    def _groups_as_columns(self,
                           aggregation: AggregationResult,
                           estimate: pd.DataFrame) -> pd.DataFrame:
        columns = list(aggregation.group_labels)
        if self.config.by_total:
            columns = [aggregation.total_label] + columns
        table = estimate.loc[:, columns].copy()
        table.columns = pd.Index(columns, name=aggregation.group.name, dtype=object)
        return table

"""Unweighted frequency diagnostics for a single column"""

from collections import OrderedDict
from typing import Any, Optional, Sequence

import pandas as pd

from .models.categorical import MISSING, CategoricalColumn


def frequencies(column: CategoricalColumn) -> "OrderedDict[Any, int]":
    """
    Unweighted count per category, Missing always included

    Keys follow the column's level order with ``MISSING`` last, even when
    no row is missing.
    """
    counts = OrderedDict((level, 0) for level in column.levels)
    counts[MISSING] = 0
    for value in column.values:
        counts[value] += 1
    return counts


def frequency_table(column: CategoricalColumn,
                    missing_label: str = "Missing",
                    digits: Optional[int] = 1) -> pd.DataFrame:
    """Frequencies as a DataFrame with ``n`` and ``%`` of all rows"""
    counts = frequencies(column)
    index = [missing_label if key is MISSING else key for key in counts]
    n = pd.Series(list(counts.values()), index=pd.Index(index, name=column.name, dtype=object),
                  dtype='int64')
    total = n.sum()
    pct = 100 * n / total if total else n * 0.0
    if digits is not None:
        pct = pct.round(digits)
    return pd.DataFrame({'n': n, '%': pct})


def frequencies_from_series(series: pd.Series,
                            levels: Optional[Sequence[Any]] = None,
                            missing_labels: Sequence[Any] = ()) -> "OrderedDict[Any, int]":
    """Frequencies of a pandas Series, via the same level rules as totals"""
    return frequencies(CategoricalColumn.from_series(series, levels=levels,
                                                     missing_labels=missing_labels))

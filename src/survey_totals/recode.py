"""First-match-wins recoding into categorical columns"""

from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import SchemaError
from .models.categorical import MISSING, CategoricalColumn

Predicate = Union[pd.Series, np.ndarray, Sequence[bool], Callable[[pd.DataFrame], Any]]


def case_when(data: pd.DataFrame,
              cases: Sequence[Tuple[Predicate, Any]],
              default: Any = None,
              levels: Optional[Sequence[Any]] = None,
              name: Optional[str] = None) -> CategoricalColumn:
    """
    Build a categorical column from an ordered decision list

    Each row takes the label of the first predicate that holds for it; rows
    matching nothing take ``default``, or Missing when there is no default.
    Predicates may be boolean arrays/Series aligned with ``data`` or
    callables taking the frame. NaN in a predicate counts as False.

    Example:
        >>> age_group = case_when(df, [
        ...     (df['age'] < 30, 'Under 30'),
        ...     (lambda d: d['age'] < 60, '30-59'),
        ... ], default='60+', name='age_group')
    """
    n_rows = len(data)
    assigned = np.zeros(n_rows, dtype=bool)
    values: List[Any] = [MISSING] * n_rows
    mentioned: List[Any] = []

    for position, (predicate, label) in enumerate(cases):
        mask = _evaluate(predicate, data, position)
        for i in np.flatnonzero(mask & ~assigned):
            values[i] = label
        assigned |= mask
        if label not in mentioned:
            mentioned.append(label)

    if default is not None:
        for i in np.flatnonzero(~assigned):
            values[i] = default
        if default not in mentioned:
            mentioned.append(default)

    return CategoricalColumn(
        name=name or 'case',
        values=tuple(values),
        levels=tuple(levels) if levels is not None else tuple(mentioned)
    )


def _evaluate(predicate: Predicate, data: pd.DataFrame, position: int) -> np.ndarray:
    if callable(predicate):
        predicate = predicate(data)
    if isinstance(predicate, pd.Series):
        mask = predicate.fillna(False).to_numpy(dtype=bool)
    else:
        mask = np.asarray(predicate)
        if mask.dtype != bool:
            mask = pd.Series(mask).fillna(False).to_numpy(dtype=bool)
    if mask.shape != (len(data),):
        raise SchemaError(
            f"Case {position} predicate has shape {mask.shape}, expected ({len(data)},)"
        )
    return mask

"""End-to-end totals: validate, aggregate, compose"""

import logging
import warnings
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import pandas as pd

from ..exceptions import ConfigError, EmptyInputWarning, SchemaError
from ..models.categorical import CategoricalColumn
from ..models.validators import DataValidator
from ..models.weights import WeightSet
from ..utils.config import TotalsConfig
from ..weighting.aggregator import WeightedAggregator
from ..weighting.composer import TableComposer, TotalsResult

logger = logging.getLogger(__name__)

SourceTable = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


class TotalsPipeline:
    """
    Validate inputs, aggregate, and compose one totals table set

    All validation (configuration first, then schema, then weight types)
    completes before any sums are computed.
    """

    def __init__(self, config: Optional[TotalsConfig] = None):
        self.config = config or TotalsConfig()
        self.logger = logging.getLogger("pipeline.totals")

    def run(self,
            data: SourceTable,
            var: str,
            weights: Optional[Union[str, Sequence[str]]] = None,
            by: Optional[str] = None,
            levels: Optional[Mapping[str, Sequence[Any]]] = None,
            title: Optional[str] = None,
            labels: Optional[Dict[str, str]] = None) -> TotalsResult:
        """
        Compute totals of ``var``, optionally by ``by``, for each weight

        Args:
            data: DataFrame or sequence of row mappings
            var: Primary categorical column
            weights: Weight column name(s); None for unweighted only
            by: Optional grouping categorical column
            levels: Column name -> ordered levels, for non-Categorical columns
            title: Optional title passed through to the result
            labels: Optional per-table labels passed through to the result

        Returns:
            TotalsResult
        """
        config = self.config
        weight_columns = self._weight_columns(weights)
        unweighted_only = not weight_columns
        config.validate(None if unweighted_only else weight_columns)
        self._check_weight_labels(weight_columns)

        frame = self._to_frame(data)
        levels = dict(levels or {})

        DataValidator.require_columns(frame, [var], role='primary')
        if by is not None:
            DataValidator.require_columns(frame, [by], role='grouping')
            if by == var:
                raise ConfigError(f"Grouping column must differ from the primary column '{var}'")

        variable = self._categorical(frame, var, levels)
        group = self._categorical(frame, by, levels) if by is not None else None
        self._check_reserved_labels(variable, group)

        if unweighted_only:
            weight_set = WeightSet.unweighted(len(frame), config.unweighted_label)
            display_names = {}
        else:
            weight_set = WeightSet.from_frame(frame, weight_columns)
            display_names = dict(zip(weight_columns, config.display_names(weight_columns)))
            if config.include_unweighted:
                weight_set = weight_set.with_unweighted(config.unweighted_label)

        self.logger.debug(
            f"Validation report: "
            f"{DataValidator.generate_validation_report(frame, variable, weight_set.weights)}"
        )
        self._warn_empty(frame, variable, group)

        self.logger.info(
            f"Computing {config.mode.value} totals of '{var}'"
            + (f" by '{by}'" if by else "")
            + f" for weights {weight_set.names} over {len(frame)} rows"
        )

        aggregator = WeightedAggregator(
            parallel=config.parallel,
            max_workers=config.max_workers,
            missing_label=config.missing_label,
            total_label=config.total_label
        )
        aggregation = aggregator.aggregate(variable, weight_set, group)

        composer = TableComposer(config)
        result = composer.compose(aggregation, display_names=display_names,
                                  title=title, labels=labels)

        self.logger.info(f"Built {len(result)} table(s) for '{var}'")
        return result

    @staticmethod
    def _weight_columns(weights: Optional[Union[str, Sequence[str]]]) -> list:
        if weights is None:
            return []
        if isinstance(weights, str):
            return [weights]
        columns = list(weights)
        if len(set(columns)) != len(columns):
            raise ConfigError(f"Weight columns must be unique: {columns}")
        return columns

    def _check_weight_labels(self, weight_columns: Sequence[str]) -> None:
        config = self.config
        if config.include_unweighted and config.unweighted_label in weight_columns:
            raise ConfigError(
                f"Weight column '{config.unweighted_label}' collides with the unweighted "
                f"column label; set unweighted_label to something else"
            )

    @staticmethod
    def _to_frame(data: SourceTable) -> pd.DataFrame:
        if isinstance(data, pd.DataFrame):
            return data
        try:
            return pd.DataFrame(list(data))
        except (TypeError, ValueError) as e:
            raise SchemaError(f"Source table must be a DataFrame or a sequence of rows: {e}")

    def _categorical(self,
                     frame: pd.DataFrame,
                     column: str,
                     levels: Mapping[str, Sequence[Any]]) -> CategoricalColumn:
        return CategoricalColumn.from_series(
            frame[column],
            levels=levels.get(column),
            missing_labels=self.config.missing_labels,
            name=column
        )

    def _check_reserved_labels(self,
                               variable: CategoricalColumn,
                               group: Optional[CategoricalColumn]) -> None:
        config = self.config
        clashes = DataValidator.check_labels(variable, [config.missing_label])
        if group is not None:
            clashes += DataValidator.check_labels(group, [config.missing_label, config.total_label])
        if clashes:
            raise ConfigError(
                f"Display label(s) {sorted(set(clashes))} are also real category levels; "
                f"choose different missing_label/total_label"
            )

    def _warn_empty(self,
                    frame: pd.DataFrame,
                    variable: CategoricalColumn,
                    group: Optional[CategoricalColumn]) -> None:
        messages = []
        if len(frame) == 0:
            messages.append(f"Source table has zero rows; '{variable.name}' totals are all zero")
        else:
            for column in [c for c in (variable, group) if c is not None]:
                unobserved = column.unobserved_levels()
                if unobserved:
                    messages.append(f"Level(s) {unobserved} of '{column.name}' never appear")
        for message in messages:
            self.logger.warning(message)
            warnings.warn(message, EmptyInputWarning, stacklevel=3)


def get_totals(data: SourceTable,
               var: str,
               weights: Optional[Union[str, Sequence[str]]] = None,
               by: Optional[str] = None,
               config: Optional[TotalsConfig] = None,
               levels: Optional[Mapping[str, Sequence[Any]]] = None,
               title: Optional[str] = None,
               labels: Optional[Dict[str, str]] = None,
               **options) -> TotalsResult:
    """
    Weighted percentages or counts of ``var``

    Options not given in ``config`` may be passed as keyword arguments
    (``mode``, ``include_unweighted``, ``by_total``, ``digits``,
    ``weight_names`` and the other ``TotalsConfig`` fields).

    Example:
        >>> get_totals(df, 'region', weights=['w1', 'w2'], digits=0).table
    """
    config = config or TotalsConfig()
    if options:
        config = config.replace(**options)
    return TotalsPipeline(config).run(data, var, weights=weights, by=by, levels=levels,
                                      title=title, labels=labels)

"""Weighted aggregation and table composition"""

from .aggregator import WeightedAggregator, AggregationResult, AggregationCell
from .composer import TableComposer, TotalsResult, round_half_up

__all__ = [
    'WeightedAggregator',
    'AggregationResult',
    'AggregationCell',
    'TableComposer',
    'TotalsResult',
    'round_half_up'
]

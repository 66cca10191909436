"""Weighted categorical totals and crosstabs for survey data"""

from .exceptions import (
    TotalsError,
    SchemaError,
    WeightTypeError,
    ConfigError,
    EmptyInputWarning
)
from .models import MISSING, CategoricalColumn, WeightSet
from .utils.config import TotalsConfig, TotalsMode
from .weighting import WeightedAggregator, AggregationResult, TableComposer, TotalsResult
from .pipeline import get_totals, TotalsPipeline
from .diagnostics import frequencies
from .recode import case_when

__version__ = "0.1.0"

__all__ = [
    'TotalsError',
    'SchemaError',
    'WeightTypeError',
    'ConfigError',
    'EmptyInputWarning',
    'MISSING',
    'CategoricalColumn',
    'WeightSet',
    'TotalsConfig',
    'TotalsMode',
    'WeightedAggregator',
    'AggregationResult',
    'TableComposer',
    'TotalsResult',
    'get_totals',
    'TotalsPipeline',
    'frequencies',
    'case_when'
]

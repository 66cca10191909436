"""Data models for survey totals"""

from .categorical import MISSING, MissingType, CategoricalColumn, is_missing
from .weights import WeightSet
from .validators import DataValidator

__all__ = [
    'MISSING',
    'MissingType',
    'CategoricalColumn',
    'is_missing',
    'WeightSet',
    'DataValidator'
]

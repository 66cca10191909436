"""Data loading and synthetic survey generation"""

from .data_loader import SurveyDataLoader
from .synthetic_generator import SyntheticSurveyGenerator

__all__ = [
    'SurveyDataLoader',
    'SyntheticSurveyGenerator'
]

"""Shared utilities"""

from .config import TotalsConfig, TotalsMode, load_config

__all__ = [
    'TotalsConfig',
    'TotalsMode',
    'load_config'
]

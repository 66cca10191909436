"""Totals pipeline entry point"""

from .totals import TotalsPipeline, get_totals

__all__ = [
    'TotalsPipeline',
    'get_totals'
]

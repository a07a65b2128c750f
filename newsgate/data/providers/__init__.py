"""
Provider adapters
One adapter per backend source
"""

from .native import NativeAdapter
from .analysis import AnalysisAdapter
from .sentiment import SentimentAdapter, SentimentTaxonomy, SentimentPost

__all__ = [
    'NativeAdapter',
    'AnalysisAdapter',
    'SentimentAdapter',
    'SentimentTaxonomy',
    'SentimentPost'
]

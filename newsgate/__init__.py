"""
NewsGate
Financial content aggregation with provider routing, caching and fallback
"""

__version__ = "0.1.0"
__author__ = "NewsGate Team"

from . import config, data, utils

__all__ = ["config", "data", "utils"]

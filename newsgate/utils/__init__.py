"""
Utility modules for NewsGate
"""

from .logger import setup_logger, get_logger, log_performance, StructuredLogger

__all__ = [
    "setup_logger",
    "get_logger",
    "log_performance",
    "StructuredLogger"
]

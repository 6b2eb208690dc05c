"""
Monitoring and Logging Module
"""
from .logger import StructuredLogger, get_logger, log_performance
from .error_reporter import ErrorReporter, get_error_reporter

__all__ = [
    'StructuredLogger',
    'get_logger',
    'log_performance',
    'ErrorReporter',
    'get_error_reporter'
]

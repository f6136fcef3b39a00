"""
Utility modules for Dining Watch.
"""

from .logger import (
    setup_logging,
    get_logger,
    get_performance_logger,
    configure_third_party_loggers,
    PerformanceLogger,
    LoggerSetup
)

from .error_handler import (
    initialize_error_handler,
    get_error_handler,
    report_error,
    handle_errors,
    GlobalErrorHandler,
    ErrorSeverity,
    ErrorReport
)

from .scheduler import JobScheduler

__all__ = [
    # Logger exports
    'setup_logging',
    'get_logger',
    'get_performance_logger',
    'configure_third_party_loggers',
    'PerformanceLogger',
    'LoggerSetup',

    # Error handler exports
    'initialize_error_handler',
    'get_error_handler',
    'report_error',
    'handle_errors',
    'GlobalErrorHandler',
    'ErrorSeverity',
    'ErrorReport',

    # Scheduler exports
    'JobScheduler'
]

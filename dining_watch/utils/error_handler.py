"""
Global error handling utilities for Dining Watch.

Provides centralized error reporting with bounded in-memory history so
recoverable failures (a single venue check, a single notification channel)
are logged consistently and can be summarized.
"""

import asyncio
import functools
import inspect
import logging
import traceback
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorReport:
    """Error report structure."""
    timestamp: datetime
    error_type: str
    error_message: str
    severity: ErrorSeverity
    component: str
    stack_trace: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'error_type': self.error_type,
            'error_message': self.error_message,
            'severity': self.severity.value,
            'component': self.component,
            'stack_trace': self.stack_trace,
            'context': self.context
        }


class GlobalErrorHandler:
    """Collects error reports and per-component statistics."""

    def __init__(self, logger: Optional[logging.Logger] = None, max_reports: int = 500):
        """
        Initialize global error handler.

        Args:
            logger: Logger used to emit reports
            max_reports: Number of reports kept in memory
        """
        self.logger = logger or logging.getLogger(__name__)
        self.start_time = datetime.now()

        self.error_reports: Deque[ErrorReport] = deque(maxlen=max_reports)
        self.error_counts = {
            'total': 0,
            'by_severity': {severity.value: 0 for severity in ErrorSeverity},
            'by_component': {}
        }

        self.logger.debug("Global error handler initialized")

    def report_error(self,
                     error: BaseException,
                     component: str,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                     context: Optional[Dict[str, Any]] = None) -> ErrorReport:
        """
        Report an error to the global handler.

        Args:
            error: The exception that occurred
            component: Component where error occurred
            severity: Error severity level
            context: Additional context information

        Returns:
            ErrorReport instance
        """
        error_report = ErrorReport(
            timestamp=datetime.now(),
            error_type=type(error).__name__,
            error_message=str(error),
            severity=severity,
            component=component,
            stack_trace=''.join(traceback.format_exception(type(error), error, error.__traceback__)),
            context=context or {}
        )

        self.error_reports.append(error_report)
        self._update_error_stats(error_report)

        self.logger.log(
            self._get_log_level_for_severity(severity),
            f"Error in {component}: {error_report.error_type}: {error_report.error_message}",
            extra={
                'component': component,
                'error_type': error_report.error_type,
                'severity': severity.value,
                'context': context
            },
            exc_info=severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL)
        )

        return error_report

    def get_error_summary(self, hours: int = 24) -> Dict[str, Any]:
        """
        Get error summary for the specified time period.

        Args:
            hours: Number of hours to look back

        Returns:
            Error summary dictionary
        """
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_errors = [error for error in self.error_reports if error.timestamp > cutoff_time]

        by_severity = {severity.value: 0 for severity in ErrorSeverity}
        by_component: Dict[str, int] = {}
        by_type: Dict[str, int] = {}

        for error in recent_errors:
            by_severity[error.severity.value] += 1
            by_component[error.component] = by_component.get(error.component, 0) + 1
            by_type[error.error_type] = by_type.get(error.error_type, 0) + 1

        return {
            'total_errors': len(recent_errors),
            'by_severity': by_severity,
            'by_component': by_component,
            'by_type': by_type,
            'recent_errors': [error.to_dict() for error in recent_errors[-10:]]
        }

    def install_loop_handler(self, loop: asyncio.AbstractEventLoop):
        """Route exceptions from unobserved asyncio tasks into the handler."""
        def handle_exception(loop, context):
            exception = context.get('exception')
            if exception is None:
                self.logger.error(f"Event loop error: {context.get('message')}")
                return

            self.report_error(
                exception,
                component="event_loop",
                severity=ErrorSeverity.HIGH,
                context={'message': context.get('message')}
            )

        loop.set_exception_handler(handle_exception)

    def _update_error_stats(self, error_report: ErrorReport):
        self.error_counts['total'] += 1
        self.error_counts['by_severity'][error_report.severity.value] += 1

        component = error_report.component
        self.error_counts['by_component'][component] = self.error_counts['by_component'].get(component, 0) + 1

    def _get_log_level_for_severity(self, severity: ErrorSeverity) -> int:
        """Get logging level for error severity."""
        mapping = {
            ErrorSeverity.LOW: logging.WARNING,
            ErrorSeverity.MEDIUM: logging.ERROR,
            ErrorSeverity.HIGH: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL
        }
        return mapping.get(severity, logging.ERROR)


# Global error handler instance
_global_error_handler: Optional[GlobalErrorHandler] = None


def initialize_error_handler(logger: Optional[logging.Logger] = None) -> GlobalErrorHandler:
    """
    Initialize the global error handler.

    Args:
        logger: Logger instance to use

    Returns:
        GlobalErrorHandler instance
    """
    global _global_error_handler

    if _global_error_handler is None:
        _global_error_handler = GlobalErrorHandler(logger)

    return _global_error_handler


def get_error_handler() -> GlobalErrorHandler:
    """Get the global error handler instance, creating it on first use."""
    if _global_error_handler is None:
        return initialize_error_handler()

    return _global_error_handler


def report_error(error: BaseException,
                 component: str,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 context: Optional[Dict[str, Any]] = None) -> ErrorReport:
    """Report an error to the global handler."""
    return get_error_handler().report_error(error, component, severity, context)


def handle_errors(component: str,
                  severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                  reraise: bool = True):
    """
    Decorator for automatic error reporting on sync or async callables.

    Args:
        component: Component name
        severity: Error severity level
        reraise: Whether to reraise the exception
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    report_error(e, component, severity, {'function': func.__name__})
                    if reraise:
                        raise
                    return None

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report_error(e, component, severity, {'function': func.__name__})
                if reraise:
                    raise
                return None

        return wrapper
    return decorator

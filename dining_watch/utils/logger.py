"""
Logging system for Dining Watch.

Provides rotating file logging, console output, optional JSON structured
logging and lightweight performance timing.
"""

import os
import sys
import logging
import logging.handlers
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from contextlib import contextmanager

try:
    import structlog
    from pythonjsonlogger import jsonlogger
except ImportError as e:
    print(f"Missing required logging dependencies: {e}")
    print("Please install: pip install structlog python-json-logger")
    sys.exit(1)


ROOT_LOGGER_NAME = "dining_watch"


class PerformanceLogger:
    """Logger for tracking performance metrics."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def timer(self, operation: str, **kwargs):
        """Context manager for timing operations."""
        start_time = time.perf_counter()

        try:
            yield
        finally:
            duration = time.perf_counter() - start_time

            self.logger.debug(
                "Performance metric",
                extra={
                    "operation": operation,
                    "duration_seconds": round(duration, 4),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    **kwargs
                }
            )

    def log_api_call(self, endpoint: str, duration: float, status_code: Optional[int] = None, **kwargs):
        """Log API call performance."""
        self.logger.debug(
            "API call performance",
            extra={
                "endpoint": endpoint,
                "duration_seconds": round(duration, 4),
                "status_code": status_code,
                **kwargs
            }
        )


class MultiLineFormatter(logging.Formatter):
    """Formatter for human-readable logs with selected extra fields appended."""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        extra_info = []

        if hasattr(record, 'duration_seconds'):
            extra_info.append(f"Duration: {record.duration_seconds}s")

        if hasattr(record, 'operation'):
            extra_info.append(f"Operation: {record.operation}")

        if hasattr(record, 'check_number'):
            extra_info.append(f"Check: {record.check_number}")

        if hasattr(record, 'venue'):
            extra_info.append(f"Venue: {record.venue}")

        if extra_info:
            formatted += f" | {' | '.join(extra_info)}"

        return formatted


class LoggerSetup:
    """Main logger setup and configuration."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize logger setup.

        Args:
            config: Configuration dictionary (optional, will use environment if None)
        """
        self.config = config or self._load_config_from_env()
        self.performance_loggers: Dict[str, PerformanceLogger] = {}
        self._setup_complete = False

    def setup_logging(self) -> logging.Logger:
        """
        Setup the logging system.

        Returns:
            Main application logger
        """
        if self._setup_complete:
            return logging.getLogger(ROOT_LOGGER_NAME)

        level = getattr(logging, self.config['level'])

        main_logger = logging.getLogger(ROOT_LOGGER_NAME)
        main_logger.handlers.clear()
        main_logger.setLevel(level)

        if self.config.get('enable_file_logging', True):
            self._setup_file_logging(main_logger)

        if self.config.get('enable_console_logging', True):
            self._setup_console_logging(main_logger)

        if self.config.get('enable_json_logging', False):
            self._setup_structured_logging()

        self.performance_loggers['main'] = PerformanceLogger(main_logger)
        self._setup_complete = True

        main_logger.info(
            "Logging system initialized",
            extra={"config": {k: v for k, v in self.config.items() if 'token' not in k.lower()}}
        )

        return main_logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            name: Logger name

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

        if name not in self.performance_loggers:
            self.performance_loggers[name] = PerformanceLogger(logger)

        return logger

    def get_performance_logger(self, name: str = 'main') -> PerformanceLogger:
        if name not in self.performance_loggers:
            self.performance_loggers[name] = PerformanceLogger(self.get_logger(name))

        return self.performance_loggers[name]

    def _create_formatter(self, datefmt: str) -> logging.Formatter:
        if self.config.get('enable_json_logging', False):
            return jsonlogger.JsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(message)s',
                datefmt=datefmt
            )

        return MultiLineFormatter(
            fmt=self.config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            datefmt=datefmt
        )

    def _setup_file_logging(self, logger: logging.Logger):
        """Setup rotating file logging."""
        log_file = self.config.get('log_file', 'logs/dining_watch.log')
        max_bytes = self.config.get('max_bytes', 10 * 1024 * 1024)
        backup_count = self.config.get('backup_count', 5)

        log_dir = os.path.dirname(log_file)
        if log_dir:
            Path(log_dir).mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(self._create_formatter('%Y-%m-%d %H:%M:%S'))
        file_handler.setLevel(getattr(logging, self.config['level']))

        logger.addHandler(file_handler)

    def _setup_console_logging(self, logger: logging.Logger):
        """Setup console logging."""
        console_handler = logging.StreamHandler(sys.stdout)

        console_level = self.config.get('console_level', self.config['level'])
        console_handler.setLevel(getattr(logging, console_level))
        console_handler.setFormatter(self._create_formatter('%H:%M:%S'))

        logger.addHandler(console_handler)

    def _setup_structured_logging(self):
        """Setup structlog for structured logging."""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _load_config_from_env(self) -> Dict[str, Any]:
        """Load logging configuration from environment variables."""
        return {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'format': os.getenv('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            'enable_file_logging': os.getenv('LOG_ENABLE_FILE_LOGGING', 'true').lower() == 'true',
            'log_file': os.getenv('LOG_FILE', 'logs/dining_watch.log'),
            'max_bytes': int(os.getenv('LOG_MAX_BYTES', str(10 * 1024 * 1024))),
            'backup_count': int(os.getenv('LOG_BACKUP_COUNT', '5')),
            'enable_console_logging': os.getenv('LOG_ENABLE_CONSOLE_LOGGING', 'true').lower() == 'true',
            'console_level': os.getenv('LOG_CONSOLE_LEVEL', 'INFO'),
            'enable_json_logging': os.getenv('LOG_ENABLE_JSON_LOGGING', 'false').lower() == 'true',
        }

    def configure_third_party_loggers(self):
        """Reduce verbosity of third-party libraries."""
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('apscheduler').setLevel(logging.WARNING)
        logging.getLogger('twilio').setLevel(logging.WARNING)


# Global logger setup instance
_logger_setup: Optional[LoggerSetup] = None


def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Setup application logging.

    Args:
        config: Optional logging configuration

    Returns:
        Main application logger
    """
    global _logger_setup

    if _logger_setup is None:
        _logger_setup = LoggerSetup(config)

    return _logger_setup.setup_logging()


def get_logger(name: str) -> logging.Logger:
    if _logger_setup is None:
        setup_logging()

    return _logger_setup.get_logger(name)


def get_performance_logger(name: str = 'main') -> PerformanceLogger:
    if _logger_setup is None:
        return PerformanceLogger(logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}"))

    return _logger_setup.get_performance_logger(name)


def configure_third_party_loggers():
    if _logger_setup is None:
        setup_logging()

    _logger_setup.configure_third_party_loggers()

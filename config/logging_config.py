"""
Centralized Logging Configuration

Separate log streams for the dashboard data layer so request traffic and
polling activity can be followed independently.

Log Categories:
- Endpoints: File-based, one line per backend request
- Polling: File-based, state container transitions and poll ticks
- Errors: File-based, errors only
- General: File-based, application-wide logs
- Console: WARNING and above
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

ENDPOINT_LOGGER = 'dashboard_data.api'
POLLING_LOGGER = 'dashboard_data.state'


class DashboardLoggingConfig:
    """Logging configuration with separated log streams."""

    def __init__(self, log_dir: str = "logs", console_level: int = logging.WARNING):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(exist_ok=True)
        self.console_level = console_level

        timestamp = datetime.now().strftime("%Y%m%d")
        self.log_files = {
            'endpoints': self.log_dir / f"endpoints_{timestamp}.log",
            'polling': self.log_dir / f"polling_{timestamp}.log",
            'errors': self.log_dir / f"errors_{timestamp}.log",
            'general': self.log_dir / f"dashboard_{timestamp}.log"
        }

        self._setup_loggers()

    def _setup_loggers(self):
        """Set up all logger configurations."""
        logging.getLogger().handlers.clear()

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        self._create_formatters()
        self._setup_handlers()
        self._configure_specific_loggers()

    def _create_formatters(self):
        """Create formatters for different log types."""
        self.file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def _setup_handlers(self):
        """Set up file and console handlers."""
        general_handler = logging.FileHandler(self.log_files['general'], encoding='utf-8')
        general_handler.setLevel(logging.INFO)
        general_handler.setFormatter(self.file_formatter)

        endpoint_handler = logging.FileHandler(self.log_files['endpoints'], encoding='utf-8')
        endpoint_handler.setLevel(logging.INFO)
        endpoint_handler.setFormatter(self.file_formatter)

        polling_handler = logging.FileHandler(self.log_files['polling'], encoding='utf-8')
        polling_handler.setLevel(logging.INFO)
        polling_handler.setFormatter(self.file_formatter)

        error_handler = logging.FileHandler(self.log_files['errors'], encoding='utf-8')
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(self.file_formatter)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(self.console_level)
        console_handler.setFormatter(self.console_formatter)

        self.handlers = {
            'general': general_handler,
            'endpoints': endpoint_handler,
            'polling': polling_handler,
            'errors': error_handler,
            'console': console_handler
        }

    def _configure_specific_loggers(self):
        """Configure specific loggers with appropriate handlers."""
        stream_loggers = {
            ENDPOINT_LOGGER: 'endpoints',
            POLLING_LOGGER: 'polling',
        }

        for logger_name, stream in stream_loggers.items():
            logger = logging.getLogger(logger_name)
            logger.setLevel(logging.INFO)
            logger.addHandler(self.handlers[stream])
            logger.addHandler(self.handlers['errors'])
            logger.addHandler(self.handlers['console'])
            logger.propagate = False

        # Everything else (views, entry point, config) goes to the general log
        root_logger = logging.getLogger()
        root_logger.addHandler(self.handlers['general'])
        root_logger.addHandler(self.handlers['errors'])
        root_logger.addHandler(self.handlers['console'])

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger with appropriate configuration."""
        return logging.getLogger(name)

    def close(self):
        """Detach and close every handler this config installed."""
        for handler in self.handlers.values():
            for logger in (logging.getLogger(), logging.getLogger(ENDPOINT_LOGGER),
                           logging.getLogger(POLLING_LOGGER)):
                logger.removeHandler(handler)
            handler.close()
        for logger_name in (ENDPOINT_LOGGER, POLLING_LOGGER):
            logging.getLogger(logger_name).propagate = True


def setup_dashboard_logging(log_dir: str = "logs", console_level: int = logging.WARNING) -> DashboardLoggingConfig:
    """Set up dashboard logging configuration."""
    return DashboardLoggingConfig(log_dir, console_level)


def log_endpoint_request(method: str, endpoint: str, status, duration: float):
    """Log endpoint requests with consistent formatting."""
    logger = get_endpoint_logger()
    logger.info(f"[{method}] {endpoint} - {status} - {duration:.3f}s")


def get_endpoint_logger() -> logging.Logger:
    """Get logger specifically for backend requests."""
    return logging.getLogger(ENDPOINT_LOGGER)


def get_polling_logger() -> logging.Logger:
    """Get logger specifically for state containers."""
    return logging.getLogger(POLLING_LOGGER)

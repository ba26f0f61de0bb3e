"""
Logging for the Inventory Manager.

Named loggers from get_logger() write to ``<directory>/<name>.log``. Module
loggers created with logging.getLogger(__name__) propagate to the root
logger, which writes to ``inventory.log``. Both also log to the console
when LOGGING.console_output is enabled.
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, List

from inventory_manager.config import config

ROOT_LOG_NAME = 'inventory'

class Logger:
    """Logging manager for the Inventory Manager."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        settings = config.log_config
        self.level = getattr(logging, settings['level'].upper(), logging.INFO)
        self.formatter = logging.Formatter(settings['format'])
        self.log_dir = Path(settings['directory'])
        self.max_bytes = settings['max_size_mb'] * 1024 * 1024
        self.backup_count = settings['backup_count']
        self.console_output = settings['console_output']
        self._loggers: Dict[str, logging.Logger] = {}

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._attach(logging.getLogger(), ROOT_LOG_NAME)

        self._initialized = True

    def _handlers(self, file_name: str) -> List[logging.Handler]:
        handlers = [
            logging.handlers.RotatingFileHandler(
                self.log_dir / f"{file_name}.log",
                maxBytes=self.max_bytes,
                backupCount=self.backup_count
            )
        ]
        if self.console_output:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setFormatter(self.formatter)
        return handlers

    def _attach(self, target: logging.Logger, file_name: str):
        """Replace the handlers of a logger with this manager's handlers."""
        target.setLevel(self.level)
        for handler in target.handlers[:]:
            target.removeHandler(handler)
        for handler in self._handlers(file_name):
            target.addHandler(handler)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger writing to its own file.

        Args:
            name: Logger name, also used as the log file name

        Returns:
            Configured logger instance
        """
        if name not in self._loggers:
            named = logging.getLogger(name)
            self._attach(named, name)
            # Own file only; keep these records out of inventory.log
            named.propagate = False
            self._loggers[name] = named
        return self._loggers[name]

    def log_exception(self, logger_name: str, exception: BaseException, message: str = None):
        """Log an exception with its stack trace."""
        self.get_logger(logger_name).error(
            f"{message}: {exception}" if message else str(exception),
            exc_info=(type(exception), exception, exception.__traceback__)
        )

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)

"""Logging infrastructure with run context."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from finwise.config.manager import get_home_dir
from finwise.config.settings import get_settings


class RunContextFilter(logging.Filter):
    """Add processing-run context to log records."""

    def __init__(self):
        super().__init__()
        self.run_id: Optional[str] = None

    def filter(self, record):
        """Add run_id to record."""
        record.run_id = self.run_id or "system"
        return True


class FinWiseLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", max_file_size_mb: int = 10, backup_count: int = 30):
        self.log_dir = get_home_dir() / "logs"
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / "finwise.log"
        self.run_filter = RunContextFilter()

        self.logger = logging.getLogger("finwise")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.propagate = False

        # Remove existing handlers
        self.logger.handlers.clear()

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [run:%(run_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        file_handler.addFilter(self.run_filter)
        console_handler.addFilter(self.run_filter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def set_run_context(self, run_id: Optional[str]):
        """Set current processing run for logging."""
        self.run_filter.run_id = run_id

    def set_level(self, log_level: str):
        """Change the logger level after initialization."""
        self.logger.setLevel(getattr(logging, log_level.upper()))

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[FinWiseLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        settings = get_settings()
        _logger_instance = FinWiseLogger(log_level, settings.log_max_file_size_mb, settings.log_backup_count)
    return _logger_instance.get_logger()


def set_log_level(log_level: str):
    """Reconfigure the level of the global logger."""
    get_logger()
    _logger_instance.set_level(log_level)


def set_run_context(run_id: Optional[str]):
    """Set run context for logging."""
    global _logger_instance
    if _logger_instance:
        _logger_instance.set_run_context(run_id)

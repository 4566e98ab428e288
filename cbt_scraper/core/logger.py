"""
Logging and Error Handling System

This module provides centralized logging configuration and error tracking
for the CBT question scraper.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
import traceback
from pathlib import Path


class ScraperLogger:
    """
    Centralized logging system for the scraper.

    Sends INFO and above to the console and keeps rotating DEBUG and
    error-only log files under the log directory.
    """

    def __init__(self, log_dir: str = "logs", app_name: str = "cbt_scraper"):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files
            app_name: Name of the application logger
        """
        self.log_dir = Path(log_dir)
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        # Ensure log directory exists
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Set up the main application logger with file and console handlers.

        Args:
            level: Console logging level (default: INFO)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if logger.handlers:
            self.loggers['main'] = logger
            return logger

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        # File handler with rotation
        log_file = self.log_dir / f"{self.app_name}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)

        error_file = self.log_dir / f"{self.app_name}_errors.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_file,
            maxBytes=5*1024*1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a child logger of the application logger.

        Args:
            name: Name of the module/component

        Returns:
            Logger instance for the module
        """
        full_name = name if name.startswith(f"{self.app_name}.") else f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)

        return self.loggers[full_name]

    def log_system_info(self):
        """Log system information for debugging."""
        logger = self.get_logger('system')

        logger.info("=== CBT scraper started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        logger.debug(f"Log directory: {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Tracks errors and warnings that occur during a run.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: list = []
        self.warnings: list = []

    def log_error(self,
                  error: Exception,
                  context: str = None,
                  url: str = None) -> str:
        """
        Log an error with context information.

        Page fetch errors carry their own URL and HTTP status; those are
        used when ``url`` is not given.

        Args:
            error: The exception that occurred
            context: Pipeline stage where the error occurred
            url: URL being processed when the error occurred

        Returns:
            Error ID for tracking
        """
        error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.errors):03d}"
        url = url or getattr(error, 'url', None)
        status_code = getattr(error, 'status_code', None)

        error_data = {
            'id': error_id,
            'timestamp': datetime.now(),
            'type': type(error).__name__,
            'message': str(error),
            'context': context,
            'url': url,
            'status_code': status_code,
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
        }

        self.errors.append(error_data)

        log_message = f"[{error_id}] {error_data['type']}: {error_data['message']}"
        if context:
            log_message += f" (Context: {context})"
        if url:
            log_message += f" (URL: {url})"
        if status_code:
            log_message += f" (HTTP {status_code})"

        self.logger.error(log_message)
        self.logger.debug(f"[{error_id}] Full traceback:\n{error_data['traceback']}")

        return error_id

    def log_warning(self,
                    message: str,
                    context: str = None,
                    url: str = None) -> str:
        """
        Log a warning with context information.

        Returns:
            Warning ID for tracking
        """
        warning_id = f"WARN_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.warnings):03d}"

        self.warnings.append({
            'id': warning_id,
            'timestamp': datetime.now(),
            'message': message,
            'context': context,
            'url': url
        })

        log_message = f"[{warning_id}] {message}"
        if context:
            log_message += f" (Context: {context})"
        if url:
            log_message += f" (URL: {url})"

        self.logger.warning(log_message)

        return warning_id

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all errors and warnings.

        Returns:
            Dictionary with error statistics and details
        """
        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'error_types': self._count_error_types(),
            'by_stage': self._count_by_stage(),
            'recent_errors': self.errors[-5:],
            'recent_warnings': self.warnings[-5:]
        }

    def _count_error_types(self) -> Dict[str, int]:
        """Count errors by type."""
        type_counts = {}
        for error in self.errors:
            error_type = error['type']
            type_counts[error_type] = type_counts.get(error_type, 0) + 1
        return type_counts

    def _count_by_stage(self) -> Dict[str, int]:
        """Count errors and warnings by pipeline stage."""
        stage_counts = {}
        for entry in self.errors + self.warnings:
            stage = (entry['context'] or 'unknown').split()[0]
            stage_counts[stage] = stage_counts.get(stage, 0) + 1
        return stage_counts


# Global logger instance
_logger_instance: Optional[ScraperLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Name of the module/component (optional)

    Returns:
        Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = ScraperLogger()

    if name:
        return _logger_instance.get_logger(name)
    else:
        return _logger_instance.get_logger('main')


def initialize_logging(log_dir: str = "logs", level: int = logging.INFO):
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files
        level: Console logging level
    """
    global _logger_instance
    _logger_instance = ScraperLogger(log_dir)
    _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()

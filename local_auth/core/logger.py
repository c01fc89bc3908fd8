"""Logging infrastructure with request ID tracking.

This module provides:
1. RequestIDFilter - Injects request UUID into all log records
2. RequestFileHandler - Optional separate log file for each request
3. setup_logger() - Configures loggers with console (+ optional file) output

Per-request files are only written when REQUEST_LOG_DIR is configured:
- Console: All logs with request_id included
- Per-request files: {REQUEST_LOG_DIR}/request_{uuid}.log

Passwords, tokens and hashes must never be passed to these loggers.

Usage:
    from local_auth.core.logger import auth_logger
    auth_logger.info("Account created")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from local_auth.core.config import LOG_LEVEL, REQUEST_LOG_DIR
from local_auth.core.middleware import get_request_id

NO_REQUEST_ID = "no-request-id"


class RequestIDFilter(logging.Filter):
    """Logging filter to inject request_id into log records.

    The request_id comes from the context variable set by RequestIDMiddleware.
    Outside a request (startup, shutdown, unit tests) it is "no-request-id".
    """

    def filter(self, record):
        record.request_id = get_request_id() or NO_REQUEST_ID
        return True


class RequestFileHandler(logging.Handler):
    """Handler that writes each request's records to its own file.

    File handlers are cached by request id; records without a request id
    only go to the console.
    """

    def __init__(self, log_dir: Path, level=logging.INFO):
        super().__init__(level)
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.file_handlers = {}  # {request_id: FileHandler}

        formatter = logging.Formatter(
            '[%(asctime)s] - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.setFormatter(formatter)

    def emit(self, record):
        try:
            request_id = getattr(record, 'request_id', NO_REQUEST_ID)
            if request_id == NO_REQUEST_ID:
                return

            if request_id not in self.file_handlers:
                log_file = self.log_dir / f"request_{request_id}.log"
                file_handler = logging.FileHandler(log_file, mode='a')
                file_handler.setFormatter(self.formatter)
                self.file_handlers[request_id] = file_handler

            self.file_handlers[request_id].emit(record)

        except Exception:
            self.handleError(record)

    def close(self):
        """Close all file handlers on shutdown."""
        for handler in self.file_handlers.values():
            handler.close()
        super().close()


def setup_logger(name: str, log_level=LOG_LEVEL, log_dir: Optional[str] = REQUEST_LOG_DIR):
    """Configure and return a logger instance.

    Creates a logger with:
    1. RequestIDFilter - Adds request_id to all log records
    2. Console handler - Outputs to stdout with request_id
    3. RequestFileHandler - Only when log_dir is given

    Args:
        name: Logger name (e.g., 'auth.core')
        log_level: Minimum log level (default: LOG_LEVEL from config)
        log_dir: Directory for per-request log files, or None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Handlers are only attached once, even if setup_logger runs again
    if logger.handlers:
        return logger

    logger.addFilter(RequestIDFilter())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_formatter = logging.Formatter(
        '[%(asctime)s] - [%(request_id)s] - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_dir:
        logger.addHandler(RequestFileHandler(Path(log_dir), level=log_level))

    return logger

# ============================================================================
# MODULE-LEVEL LOGGERS
# ============================================================================
# Import these in other modules instead of creating new loggers

app_logger = setup_logger('auth.main')      # For main.py
api_logger = setup_logger('auth.routes')    # For auth_routes.py / dependencies.py
auth_logger = setup_logger('auth.core')     # For service.py / jwt_handler.py
store_logger = setup_logger('auth.store')   # For store.py

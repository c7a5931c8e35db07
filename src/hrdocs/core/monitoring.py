"""
Logging and performance monitoring utilities for the HRDocs analysis service.
Provides structured JSON logging and an operation timing decorator.
"""

import json
import logging
import time
from datetime import datetime
from functools import wraps
from typing import Callable

# Record attributes copied into structured log lines when present
_EXTRA_FIELDS = (
    'request_id',
    'user_id',
    'document_id',
    'service',
    'operation',
    'execution_time_ms',
    'success',
    'error_type',
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(log_level: str = "INFO", structured: bool = True):
    """
    Set up application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Whether to use structured JSON logging
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


def monitor_performance(service: str, operation: str):
    """
    Time an async pipeline operation and log its outcome with structured extras.

    The ``document_id`` (or ``contract_id``) keyword argument, when passed, is
    attached to the record.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            failure = None

            try:
                return await func(*args, **kwargs)
            except Exception as e:
                failure = e
                raise
            finally:
                extra = {
                    'service': service,
                    'operation': operation,
                    'execution_time_ms': round((time.perf_counter() - started) * 1000, 2),
                    'success': failure is None
                }
                document_id = kwargs.get('document_id') or kwargs.get('contract_id')
                if document_id:
                    extra['document_id'] = document_id

                op_logger = logging.getLogger(f"{service}.{operation}")
                if failure is None:
                    op_logger.info(f"{operation} finished in {extra['execution_time_ms']}ms", extra=extra)
                else:
                    extra['error_type'] = type(failure).__name__
                    op_logger.error(f"{operation} failed: {failure}", extra=extra)

        return wrapper
    return decorator

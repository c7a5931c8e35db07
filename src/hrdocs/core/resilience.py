"""
Error taxonomy and graceful degradation helpers for the HRDocs analysis service.

Business failures are raised as AnalysisError subclasses and reported to the
caller as ``{"success": false, "error": ...}``. Extraction internals never
raise: they degrade to empty or absent values through ``fail_soft``.
"""

import inspect
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class AnalysisError(Exception):
    """Base class for failures reported back to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(AnalysisError):
    """Missing or invalid bearer credential."""
    pass


class InputValidationError(AnalysisError):
    """The request does not carry a usable file."""
    pass


class PersistenceError(AnalysisError):
    """Writing the analysis result to the document store failed."""
    pass


def fail_soft(default: Any, operation: str = ""):
    """
    Decorator returning ``default`` instead of propagating an exception.

    Args:
        default: Value returned when the wrapped function raises
        operation: Name used in the log record (defaults to the function name)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = operation or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{name} failed, degrading to default: {str(e)}", exc_info=True)
                return default

        return wrapper
    return decorator


async def best_effort(operation: str, func: Callable, *args, **kwargs) -> bool:
    """
    Run a collaborator call whose failure must not abort the request.

    Args:
        operation: Name used in the log record
        func: Callable to execute (sync or async)
        *args: Function arguments
        **kwargs: Function keyword arguments

    Returns:
        True if the call succeeded, False if it raised
    """
    try:
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            await result
        return True
    except Exception as e:
        logger.warning(f"Best-effort operation '{operation}' failed: {str(e)}")
        return False

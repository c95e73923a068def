"""
Use-case boundary.

Expected failures are already Results. Anything else raised inside a
use case (store I/O, bugs) is logged in full with the correlation id
and turned into a generic INTERNAL Result. Cancellation is not caught.
"""

import functools
import logging

from docverify.config.logging_config import get_correlation_id
from docverify.core.result import Result

logger = logging.getLogger(__name__)


def use_case_boundary(operation: str):
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception:
                cid = get_correlation_id()
                logger.exception(f"{operation} failed unexpectedly (correlation_id={cid})")
                return Result.internal(detail=f"correlation_id={cid}")
        return wrapper
    return decorator

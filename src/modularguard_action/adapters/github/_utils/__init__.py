# _utils/__init__.py

from .retry import RETRYABLE_STATUS_CODES, is_retryable, retry_delay

__all__ = [
    "RETRYABLE_STATUS_CODES",
    "is_retryable",
    "retry_delay",
]

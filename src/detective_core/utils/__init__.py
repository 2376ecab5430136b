"""Utility Functions"""

from detective_core.utils.resilience import (
    TRANSIENT_HTTP_ERRORS,
    create_fetch_retry,
    service_startup_retry,
)

__all__ = [
    "TRANSIENT_HTTP_ERRORS",
    "create_fetch_retry",
    "service_startup_retry",
]

"""
Utility modules for the branch guard.
"""

from branch_guard.utils.logging import (
    get_logger,
    setup_logging,
    log_pr_event,
    log_api_call,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_pr_event",
    "log_api_call",
    "log_error_with_context",
]

"""Data models for the branch guard."""

from .result import (
    ErrorKind,
    PolicyError,
    PolicyOutcome,
    PolicyResult,
    WebhookResponse,
)
from .pr_event import (
    GitHubEventPayload,
    PullRequestEvent,
    parse_pull_request_event,
)

__all__ = [
    # Result models
    "ErrorKind",
    "PolicyError",
    "PolicyOutcome",
    "PolicyResult",
    "WebhookResponse",
    # Event models
    "GitHubEventPayload",
    "PullRequestEvent",
    "parse_pull_request_event",
]

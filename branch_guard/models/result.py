"""Policy check result models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from branch_guard.errors import ErrorKind


class PolicyOutcome(str, Enum):
    """Final outcome of one policy check."""

    NO_CHANGE = "no_change"
    BASE_UPDATED = "base_updated"
    FAILED = "failed"


class PolicyError(BaseModel):
    """Error detail attached to a failed result."""

    kind: ErrorKind
    message: str


class PolicyResult(BaseModel):
    """Result of running the branch policy against one pull request."""

    outcome: PolicyOutcome
    pull_request_number: Optional[int] = None
    head_branch: Optional[str] = None
    base_branch: Optional[str] = None
    new_base_branch: Optional[str] = None
    error: Optional[PolicyError] = None

    @property
    def success(self) -> bool:
        return self.outcome != PolicyOutcome.FAILED


class WebhookResponse(BaseModel):
    """Response from webhook handler."""

    status: str
    message: str
    result: Optional[PolicyResult] = None

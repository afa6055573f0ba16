"""Exception taxonomy for branch policy checks."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Reasons a policy check can fail."""

    MISSING_DATA = "missing_data"
    POLICY_VIOLATION = "policy_violation"
    REMOTE_OPERATION_FAILURE = "remote_operation_failure"


class BranchGuardError(Exception):
    """Base exception for branch guard errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingDataError(BranchGuardError):
    """A required field of the pull request event is absent."""

    kind = ErrorKind.MISSING_DATA

    def __init__(self, message: str = "The PR is not valid."):
        super().__init__(message)


class PolicyViolationError(BranchGuardError):
    """The head branch does not satisfy the naming rule."""

    kind = ErrorKind.POLICY_VIOLATION

    def __init__(self, head_branch: str, allowed_prefix: str):
        self.head_branch = head_branch
        super().__init__(
            f"The head branch '{head_branch}' is not an allowed head branch for development."
            f" Please create a PR with a head branch that starts with the '{allowed_prefix}' prefix."
        )


class RemoteOperationError(BranchGuardError):
    """A GitHub API call failed (transport, permissions or remote validation)."""

    kind = ErrorKind.REMOTE_OPERATION_FAILURE

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

"""Business logic services package."""

from branch_guard.services.github_client import GitHubClient
from branch_guard.services.branch_policy import (
    BranchPolicyValidator,
    check_pull_request,
)

__all__ = [
    'GitHubClient',
    'BranchPolicyValidator',
    'check_pull_request',
]

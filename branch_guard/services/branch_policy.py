"""
Branch policy validator.

Checks a pull request's head branch against the naming rule and, when a
protected base branch is targeted by an untrusted head, rewrites the base to
the policy's fallback branch.
"""

from typing import Any, Mapping, Optional

from branch_guard.config import DEFAULT_POLICY, BranchPolicy
from branch_guard.errors import BranchGuardError, MissingDataError, PolicyViolationError
from branch_guard.models.pr_event import PullRequestEvent, parse_pull_request_event
from branch_guard.models.result import PolicyError, PolicyOutcome, PolicyResult
from branch_guard.services.github_client import GitHubClient
from branch_guard.utils.logging import get_logger, log_error_with_context, log_pr_event

logger = get_logger(__name__)


class BranchPolicyValidator:
    """Applies a ``BranchPolicy`` to pull request events."""

    def __init__(self, client: GitHubClient, policy: BranchPolicy = DEFAULT_POLICY):
        self.client = client
        self.policy = policy

    def validate_head_branch(self, head_branch: Optional[str]) -> None:
        """
        Ensure the head branch follows the development naming rule.

        Raises:
            MissingDataError: If the head branch is absent
            PolicyViolationError: If the head branch does not match the pattern
        """
        if head_branch is None:
            raise MissingDataError()

        if self.policy.head_branch_allowed(head_branch):
            logger.info("The head branch is valid. Continue the workflow.", extra={"head_branch": head_branch})
            return

        if self.policy.is_trusted_head(head_branch):
            # Trusted heads are still subject to the naming rule
            logger.warning(
                f"Trusted head branch '{head_branch}' is rejected by the head branch naming rule",
                extra={"head_branch": head_branch},
            )

        raise PolicyViolationError(head_branch, self.policy.allowed_head_prefix)

    async def validate_and_fix_base_branch(self, event: PullRequestEvent) -> bool:
        """
        Redirect the pull request to the fallback base when required.

        Args:
            event: Parsed pull request event

        Returns:
            True if the base branch was rewritten, False if no change was needed

        Raises:
            RemoteOperationError: If the update call fails
        """
        is_safe_base = not self.policy.is_dangerous_base(event.base_branch)
        is_trusted_head = self.policy.is_trusted_head(event.head_branch)

        if is_safe_base or is_trusted_head:
            logger.info(
                "No changes are required to the base branch.",
                extra={"pr_number": event.pull_request_number, "base_branch": event.base_branch},
            )
            return False

        await self.client.update_pull_request(
            owner=event.repository_owner,
            repo=event.repository_name,
            pull_number=event.pull_request_number,
            base=self.policy.safe_fallback_base,
        )

        logger.info(
            f"The base branch has been updated to '{self.policy.safe_fallback_base}'",
            extra={
                "pr_number": event.pull_request_number,
                "repository": event.repository,
                "base_branch": event.base_branch,
            },
        )
        return True

    async def run(self, event: PullRequestEvent) -> PolicyResult:
        """
        Run head validation, then the base-branch fix.

        Policy errors are returned as a failed ``PolicyResult`` rather than
        raised; anything else propagates.
        """
        event_logger = logger.with_context(
            pr_number=event.pull_request_number,
            repository=event.repository,
        )
        log_pr_event(
            event_logger,
            pr_number=event.pull_request_number,
            repository=event.repository,
            head_branch=event.head_branch,
            base_branch=event.base_branch,
            action=event.action,
        )

        result = PolicyResult(
            outcome=PolicyOutcome.NO_CHANGE,
            pull_request_number=event.pull_request_number,
            head_branch=event.head_branch,
            base_branch=event.base_branch,
        )

        try:
            self.validate_head_branch(event.head_branch)
            updated = await self.validate_and_fix_base_branch(event)
        except BranchGuardError as e:
            log_error_with_context(
                event_logger,
                f"Branch policy check failed: {e.message}",
                e,
                error_kind=e.kind.value,
            )
            return result.model_copy(
                update={
                    "outcome": PolicyOutcome.FAILED,
                    "error": PolicyError(kind=e.kind, message=e.message),
                }
            )

        if updated:
            return result.model_copy(
                update={
                    "outcome": PolicyOutcome.BASE_UPDATED,
                    "new_base_branch": self.policy.safe_fallback_base,
                }
            )
        return result


async def check_pull_request(
    payload: Mapping[str, Any],
    client: GitHubClient,
    policy: BranchPolicy = DEFAULT_POLICY,
    repository: Optional[str] = None,
) -> PolicyResult:
    """
    Parse a raw event payload and run the branch policy against it.

    Args:
        payload: Decoded GitHub event JSON
        client: GitHub client used for the base-branch rewrite
        policy: Branch policy to apply
        repository: ``owner/name`` fallback when the payload lacks one

    Returns:
        Result of the check; a payload with missing fields yields a
        ``missing_data`` failure without any remote call
    """
    try:
        event = parse_pull_request_event(payload, repository=repository)
    except MissingDataError as e:
        logger.error(f"Branch policy check failed: {e.message}", extra={"error_kind": e.kind.value})
        return PolicyResult(
            outcome=PolicyOutcome.FAILED,
            error=PolicyError(kind=e.kind, message=e.message),
        )

    validator = BranchPolicyValidator(client, policy)
    return await validator.run(event)

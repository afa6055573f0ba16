"""Pull request event data models."""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from branch_guard.errors import MissingDataError


class GitRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ref: Optional[str] = None
    sha: Optional[str] = None


class PullRequestPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Strict so booleans and numeric strings are not read as a PR number
    number: Optional[StrictInt] = None
    head: Optional[GitRef] = None
    base: Optional[GitRef] = None


class RepositoryOwner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: Optional[str] = None


class RepositoryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    owner: Optional[RepositoryOwner] = None


class GitHubEventPayload(BaseModel):
    """Loosely-typed GitHub ``pull_request`` event as delivered by webhooks and Actions."""

    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    pull_request: Optional[PullRequestPayload] = None
    repository: Optional[RepositoryPayload] = None


class PullRequestEvent(BaseModel):
    """Fully-populated pull request event the policy validator works on."""

    model_config = ConfigDict(frozen=True)

    head_branch: str
    base_branch: str
    pull_request_number: int
    repository_owner: str
    repository_name: str
    action: Optional[str] = None

    @property
    def repository(self) -> str:
        return f"{self.repository_owner}/{self.repository_name}"


def _split_repository(repository: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    if not repository or "/" not in repository:
        return None, None
    owner, _, name = repository.partition("/")
    return owner or None, name or None


def parse_pull_request_event(
    payload: Mapping[str, Any],
    repository: Optional[str] = None,
) -> PullRequestEvent:
    """
    Validate a raw event payload into a ``PullRequestEvent``.

    Args:
        payload: Decoded event JSON
        repository: Explicit ``owner/name`` (``--repository`` or
            ``GITHUB_REPOSITORY`` in Actions); when given it is used instead of
            the payload's repository block

    Returns:
        Fully-populated event

    Raises:
        MissingDataError: If the head ref, base ref, number or repository
            identity is absent, or the payload has an unexpected shape
    """
    try:
        event = GitHubEventPayload.model_validate(payload)
    except ValidationError as e:
        raise MissingDataError() from e

    pull_request = event.pull_request
    if pull_request is None:
        raise MissingDataError()

    head_branch = pull_request.head.ref if pull_request.head else None
    base_branch = pull_request.base.ref if pull_request.base else None
    if pull_request.number is None or head_branch is None or base_branch is None:
        raise MissingDataError()

    if repository:
        owner, name = _split_repository(repository)
    elif event.repository is not None:
        owner = event.repository.owner.login if event.repository.owner else None
        name = event.repository.name
    else:
        owner, name = None, None
    if not owner or not name:
        raise MissingDataError()

    return PullRequestEvent(
        head_branch=head_branch,
        base_branch=base_branch,
        pull_request_number=pull_request.number,
        repository_owner=owner,
        repository_name=name,
        action=event.action,
    )

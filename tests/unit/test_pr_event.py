"""
Unit tests for pull request event parsing.
"""

import pytest
from pydantic import ValidationError

from branch_guard.errors import ErrorKind, MissingDataError
from branch_guard.models.pr_event import PullRequestEvent, parse_pull_request_event


def make_payload(head="preview/feature-x", base="main", number=12, repository=True):
    """Build a GitHub pull_request event payload."""
    payload = {
        "action": "opened",
        "number": number,
        "pull_request": {
            "number": number,
            "title": "Add feature",
            "head": {"ref": head, "sha": "abc123"},
            "base": {"ref": base, "sha": "def456"},
        },
    }
    if repository:
        payload["repository"] = {
            "name": "app",
            "full_name": "octo/app",
            "owner": {"login": "octo"},
        }
    return payload


def test_parse_complete_payload():
    """A complete payload yields a fully-populated event."""
    event = parse_pull_request_event(make_payload())

    assert event == PullRequestEvent(
        head_branch="preview/feature-x",
        base_branch="main",
        pull_request_number=12,
        repository_owner="octo",
        repository_name="app",
        action="opened",
    )
    assert event.repository == "octo/app"


def test_parse_uses_repository_fallback():
    """Owner and name come from GITHUB_REPOSITORY when the payload has none."""
    event = parse_pull_request_event(make_payload(repository=False), repository="acme/service")

    assert event.repository_owner == "acme"
    assert event.repository_name == "service"


def test_explicit_repository_takes_precedence():
    """An explicit owner/name wins over the payload's repository block."""
    event = parse_pull_request_event(make_payload(), repository="acme/service")

    assert event.repository_owner == "acme"
    assert event.repository_name == "service"


def test_repository_sources_are_not_mixed():
    """Owner and name always come from the same source."""
    payload = make_payload()
    del payload["repository"]["name"]

    with pytest.raises(MissingDataError):
        parse_pull_request_event(payload)

    event = parse_pull_request_event(payload, repository="acme/service")
    assert event.repository == "acme/service"


def test_empty_branch_names_are_present():
    """Only absent values count as missing."""
    event = parse_pull_request_event(make_payload(head="", base=""))

    assert event.head_branch == ""
    assert event.base_branch == ""


@pytest.mark.parametrize("mutate", [
    lambda p: p["pull_request"]["head"].pop("ref"),
    lambda p: p["pull_request"]["base"].pop("ref"),
    lambda p: p["pull_request"].pop("number"),
    lambda p: p["pull_request"].pop("head"),
    lambda p: p["pull_request"].update(base=None),
    lambda p: p.pop("pull_request"),
    lambda p: p["pull_request"]["head"].update(ref=None),
    lambda p: p["pull_request"].update(number=True),
    lambda p: p["pull_request"].update(number="7"),
    lambda p: p["pull_request"].update(number=1.5),
])
def test_missing_required_field(mutate):
    """Absent head ref, base ref or number, or a non-integer number, raises MissingDataError."""
    payload = make_payload()
    mutate(payload)

    with pytest.raises(MissingDataError) as exc_info:
        parse_pull_request_event(payload)

    assert exc_info.value.kind == ErrorKind.MISSING_DATA
    assert exc_info.value.message == "The PR is not valid."


def test_missing_repository_identity():
    """Without a repository block or fallback the event is incomplete."""
    with pytest.raises(MissingDataError):
        parse_pull_request_event(make_payload(repository=False))


def test_malformed_payload_shape():
    """A payload whose shape cannot be read is treated as missing data."""
    payload = make_payload()
    payload["pull_request"] = "not-an-object"

    with pytest.raises(MissingDataError):
        parse_pull_request_event(payload)


def test_event_is_immutable():
    """Parsed events cannot be modified."""
    event = parse_pull_request_event(make_payload())

    with pytest.raises(ValidationError):
        event.head_branch = "main"

"""
GitHub Actions entry point.

Reads the event the workflow was triggered by, applies the branch policy and
exits non-zero when the check fails so the workflow run is marked as failed.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from branch_guard.config import DEFAULT_POLICY, Settings, get_settings
from branch_guard.models.result import PolicyResult
from branch_guard.services.branch_policy import check_pull_request
from branch_guard.services.github_client import GitHubClient
from branch_guard.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="branch-guard",
        description="Validate and correct the head/base branches of a pull request.",
    )
    parser.add_argument(
        "--event-path",
        help="Path to the event JSON (defaults to GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--repository",
        help="owner/name of the repository; takes precedence over the event payload (defaults to GITHUB_REPOSITORY)",
    )
    return parser.parse_args(argv)


def load_event(event_path: Path) -> Dict[str, Any]:
    return json.loads(event_path.read_text(encoding="utf-8"))


async def run_check(payload: Dict[str, Any], repository: Optional[str], settings: Settings) -> PolicyResult:
    async with GitHubClient(
        token=settings.github_token,
        api_url=settings.github_api_url,
        timeout=settings.request_timeout_seconds,
    ) as client:
        return await check_pull_request(payload, client, DEFAULT_POLICY, repository=repository)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    event_path = args.event_path or settings.github_event_path
    if not event_path:
        print("::error::No event payload given (set GITHUB_EVENT_PATH or pass --event-path)", file=sys.stderr)
        return EXIT_FAILED

    try:
        payload = load_event(Path(event_path))
    except (OSError, ValueError) as e:
        print(f"::error::Could not read event payload {event_path}: {e}", file=sys.stderr)
        return EXIT_FAILED

    result = asyncio.run(run_check(payload, args.repository or settings.github_repository, settings))

    if result.success:
        return EXIT_OK

    print(f"::error::{result.error.message}", file=sys.stderr)
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())

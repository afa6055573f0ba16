"""
Webhook endpoints for GitHub pull request events.
"""

import hashlib
import hmac
import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from branch_guard.config import DEFAULT_POLICY, BranchPolicy, Settings, get_settings
from branch_guard.errors import ErrorKind
from branch_guard.models.result import PolicyOutcome, WebhookResponse
from branch_guard.services.branch_policy import check_pull_request
from branch_guard.services.github_client import GitHubClient
from branch_guard.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

ERROR_STATUS_CODES = {
    ErrorKind.MISSING_DATA: 400,
    ErrorKind.POLICY_VIOLATION: 422,
    ErrorKind.REMOTE_OPERATION_FAILURE: 502,
}


def get_policy() -> BranchPolicy:
    return DEFAULT_POLICY


async def get_github_client(settings: Settings = Depends(get_settings)):
    async with GitHubClient(
        token=settings.github_token,
        api_url=settings.github_api_url,
        timeout=settings.request_timeout_seconds,
    ) as client:
        yield client


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Verify a GitHub ``X-Hub-Signature-256`` header.

    Args:
        payload: Raw request payload
        signature: Header value, ``sha256=<hex digest>``
        secret: Shared webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature or not signature.startswith("sha256="):
        return False

    expected_signature = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature[len("sha256="):], expected_signature)


@router.post("/github/pull-request", response_model=WebhookResponse)
async def handle_pull_request_webhook(
    request: Request,
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
    x_hub_signature_256: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    settings: Settings = Depends(get_settings),
    policy: BranchPolicy = Depends(get_policy),
    client: GitHubClient = Depends(get_github_client),
):
    """
    Receive a GitHub ``pull_request`` webhook and enforce the branch policy.

    The check runs inline so the response reflects its outcome:
    200 when the policy is satisfied or the base was rewritten, 400 for a
    payload missing required fields, 422 for a disallowed head branch and
    502 when GitHub rejects the base-branch update.

    Raises:
        HTTPException: If the signature is invalid or the body is not JSON
    """
    payload = await request.body()

    if settings.webhook_secret and not verify_webhook_signature(
        payload, x_hub_signature_256, settings.webhook_secret
    ):
        logger.warning("Invalid webhook signature received")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if x_github_event != "pull_request":
        logger.info(f"Ignoring event type: {x_github_event}")
        return WebhookResponse(status="ignored", message=f"Event type {x_github_event} not processed")

    try:
        payload_json: Dict[str, Any] = json.loads(payload)
    except ValueError:
        raise HTTPException(status_code=400, detail="Webhook body is not valid JSON")
    if not isinstance(payload_json, dict):
        raise HTTPException(status_code=400, detail="Webhook body is not a JSON object")

    action = payload_json.get("action")
    if action not in settings.handled_actions:
        logger.info(f"Ignoring pull_request action: {action}")
        return WebhookResponse(status="ignored", message=f"Action {action} not processed")

    result = await check_pull_request(payload_json, client, policy)

    if result.success:
        if result.outcome == PolicyOutcome.BASE_UPDATED:
            message = f"The base branch has been updated to '{result.new_base_branch}'"
        else:
            message = "No changes are required to the base branch."
        return WebhookResponse(status=result.outcome.value, message=message, result=result)

    response = WebhookResponse(status="rejected", message=result.error.message, result=result)
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[result.error.kind],
        content=response.model_dump(mode="json"),
    )

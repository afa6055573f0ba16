"""
Configuration management.

``Settings`` carries the runtime environment (token, API endpoint, webhook
secret, log level). ``BranchPolicy`` carries the branch rules themselves and is
not read from the environment.
"""

import re
from functools import lru_cache
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BranchPolicy(BaseModel):
    """Immutable branch policy applied to every pull request."""

    model_config = ConfigDict(frozen=True)

    # Protected branches that must not receive PRs from untrusted heads
    dangerous_base_branches: FrozenSet[str] = frozenset({"main", "hotfix"})
    # Heads exempt from the base-branch rewrite
    trusted_head_branches: FrozenSet[str] = frozenset({"main", "hotfix", "develop"})
    # Matched with re.match, so it also accepts "preview" and "previewfoo"
    allowed_head_pattern: str = r"^preview/*"
    allowed_head_prefix: str = "preview/"
    safe_fallback_base: str = "develop"

    @field_validator("allowed_head_pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid head branch pattern {value!r}: {e}") from e
        return value

    def head_branch_allowed(self, head_branch: str) -> bool:
        return re.match(self.allowed_head_pattern, head_branch) is not None

    def is_dangerous_base(self, base_branch: str) -> bool:
        return base_branch in self.dangerous_base_branches

    def is_trusted_head(self, head_branch: str) -> bool:
        return head_branch in self.trusted_head_branches


DEFAULT_POLICY = BranchPolicy()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # GitHub
    github_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    github_repository: Optional[str] = None  # owner/name, set by Actions
    github_event_path: Optional[str] = None

    # Webhook
    webhook_secret: Optional[str] = None  # signature check is skipped when unset
    handled_actions: List[str] = ["opened", "reopened", "edited", "synchronize"]

    # Application
    log_level: str = "INFO"
    request_timeout_seconds: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

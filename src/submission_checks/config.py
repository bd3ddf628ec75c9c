"""Run settings, read from the environment (``.env`` is loaded by the CLI)."""

import os
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from submission_checks.exceptions import ConfigurationError

_REPO_SLUG = re.compile(r"^[\w.-]+/[\w.-]+$")


class ReviewSettings(BaseModel):
    """Where the submission lives and where the review comments go."""

    repo_url: str
    branch: Optional[str] = None
    issue_id: Optional[int] = None
    reviews_repo: Optional[str] = None
    token: Optional[str] = None
    local_path: Optional[str] = None

    @field_validator("repo_url")
    @classmethod
    def _require_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("repository URL is empty")
        return v

    @field_validator("branch", "token", "local_path", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("issue_id", mode="before")
    @classmethod
    def _parse_issue_id(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip().lstrip("#")
            return int(v) if v else None
        return v

    @field_validator("issue_id")
    @classmethod
    def _positive_issue_id(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("issue id must be positive")
        return v

    @field_validator("reviews_repo", mode="before")
    @classmethod
    def _check_slug(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if not _REPO_SLUG.match(v):
                raise ValueError("reviews repo must look like 'owner/name'")
        return v

    @property
    def can_post(self) -> bool:
        """True when there is an issue to post the comments on."""
        return self.issue_id is not None and self.reviews_repo is not None

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: object,
    ) -> "ReviewSettings":
        """Build settings from environment variables; non-None overrides win."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "repo_url": env.get("REPO_URL", ""),
            "branch": env.get("PAPER_BRANCH"),
            "issue_id": env.get("ISSUE_ID"),
            "reviews_repo": env.get("REVIEWS_REPO"),
            "token": env.get("GITHUB_TOKEN") or env.get("GH_TOKEN"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
            raise ConfigurationError("Invalid settings", {"fields": fields}) from exc

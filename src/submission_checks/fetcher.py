"""GitHub REST API client: engagement data and posting review comments."""

import logging
from datetime import datetime
from typing import Optional

import httpx

from submission_checks.models import Issue, PullRequest

logger = logging.getLogger(__name__)


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubFetcher:
    """Reads repository engagement and writes issue comments and labels."""

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token
        self.base_url = "https://api.github.com"
        self._client: Optional[httpx.AsyncClient] = None

    # ── HTTP plumbing ─────────────────────────────────────────────────────

    @property
    def headers(self) -> dict[str, str]:
        h: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=30.0,
            )
        return self._client

    def _check_rate_limit(self, resp: httpx.Response) -> None:
        if resp.status_code == 403 and "rate limit" in resp.text.lower():
            remaining = resp.headers.get("x-ratelimit-remaining", "0")
            if self.token:
                hint = (
                    f"Authenticated rate limit hit (remaining: {remaining}). "
                    "Wait a few minutes and retry."
                )
            else:
                hint = "Unauthenticated (60 req/hour). Set GITHUB_TOKEN to get 5 000 req/hour."
            raise httpx.HTTPStatusError(
                f"GitHub API rate limit exceeded. {hint}",
                request=resp.request,
                response=resp,
            )

    async def _get(self, path: str, **kwargs) -> httpx.Response:  # type: ignore[no-untyped-def]
        client = await self._client_instance()
        resp = await client.get(path, **kwargs)
        self._check_rate_limit(resp)
        return resp

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        client = await self._client_instance()
        resp = await client.post(path, json=payload)
        self._check_rate_limit(resp)
        resp.raise_for_status()
        return resp

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Paginated helper ──────────────────────────────────────────────────

    async def _paginate(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        max_pages: Optional[int] = 10,
    ) -> list[dict]:
        """Fetch pages from a paginated GitHub endpoint.

        ``max_pages=None`` reads every page; use it when the caller reports
        totals rather than a sample.
        """
        params = dict(params or {})
        params.setdefault("per_page", "100")

        results: list[dict] = []
        page = 0
        while max_pages is None or page < max_pages:
            page += 1
            params["page"] = str(page)
            resp = await self._get(path, params=params)
            resp.raise_for_status()
            data = resp.json()
            if not data:
                break
            results.extend(data)
            if len(data) < int(params["per_page"]):
                break
        return results

    # ── Repo metadata ─────────────────────────────────────────────────────

    async def fetch_repo_info(self, owner: str, repo: str) -> dict:
        """Fetch basic repo information (stars, forks, watchers …)."""
        resp = await self._get(f"/repos/{owner}/{repo}")
        resp.raise_for_status()
        return resp.json()

    async def fetch_license(
        self, owner: str, repo: str, ref: Optional[str] = None
    ) -> Optional[dict]:
        """Fetch GitHub's license detection for the repo; None if it found none."""
        params = {"ref": ref} if ref else None
        resp = await self._get(f"/repos/{owner}/{repo}/license", params=params)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    # ── Issues ────────────────────────────────────────────────────────────

    async def fetch_issues(
        self, owner: str, repo: str, state: str = "all"
    ) -> list[Issue]:
        """Fetch issues (the issues endpoint also lists PRs; those are dropped)."""
        raw = await self._paginate(
            f"/repos/{owner}/{repo}/issues",
            params={"state": state},
            max_pages=None,
        )
        issues: list[Issue] = []
        for item in raw:
            if "pull_request" in item:
                continue
            issues.append(
                Issue(
                    number=item["number"],
                    title=item["title"],
                    author=item["user"]["login"],
                    state=item["state"],
                    created_at=_parse_ts(item["created_at"]),
                    closed_at=_parse_ts(item.get("closed_at")),
                    url=item["html_url"],
                )
            )
        return issues

    # ── Pull Requests ─────────────────────────────────────────────────────

    async def fetch_pull_requests(
        self, owner: str, repo: str, state: str = "all"
    ) -> list[PullRequest]:
        """Fetch pull requests in any state."""
        raw = await self._paginate(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": state},
            max_pages=None,
        )
        return [
            PullRequest(
                number=item["number"],
                title=item["title"],
                author=item["user"]["login"],
                created_at=_parse_ts(item["created_at"]),
                merged_at=_parse_ts(item.get("merged_at")),
                closed_at=_parse_ts(item.get("closed_at")),
                url=item["html_url"],
            )
            for item in raw
        ]

    # ── Review issue output ───────────────────────────────────────────────

    async def post_issue_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> dict:
        """Post a markdown comment on an issue."""
        logger.info("Commenting on %s/%s#%d", owner, repo, issue_number)
        resp = await self._post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            {"body": body},
        )
        return resp.json()

    async def add_issue_labels(
        self, owner: str, repo: str, issue_number: int, labels: list[str]
    ) -> list[dict]:
        """Add labels to an issue (existing labels are kept)."""
        logger.info("Labelling %s/%s#%d with %s", owner, repo, issue_number, labels)
        resp = await self._post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/labels",
            {"labels": labels},
        )
        return resp.json()

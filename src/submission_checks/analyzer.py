"""Submission checks orchestrator.

Clones the submitted repository, runs every local check, polls the forge
for engagement data and publishes the rendered comments on the review
issue.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import httpx

from submission_checks.analysis.bulk_contributions import build_history_report
from submission_checks.analysis.engagement import build_engagement_report
from submission_checks.analysis.languages import build_language_report
from submission_checks.analysis.license import (
    build_license_report,
    license_report_from_github,
)
from submission_checks.analysis.paper import build_paper_report
from submission_checks.cloner import RepoCloner
from submission_checks.config import ReviewSettings
from submission_checks.exceptions import ConfigurationError, HistoryBackendError
from submission_checks.fetcher import GitHubFetcher
from submission_checks.history import extract_commit_timeline
from submission_checks.models import EngagementReport, LicenseReport, ReviewReport
from submission_checks.report import parse_github_repo, render_comments

logger = logging.getLogger(__name__)

LANGUAGE_LABEL_COUNT = 3


class SubmissionChecker:
    """End-to-end checks for one submitted repository."""

    def __init__(
        self,
        settings: ReviewSettings,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.settings = settings
        self._on_status = on_status or (lambda _: None)
        self._fetcher = GitHubFetcher(token=settings.token)
        self._cloner = RepoCloner(token=settings.token)

    # ── Status helper ─────────────────────────────────────────────────────

    def _status(self, msg: str) -> None:
        logger.info(msg)
        self._on_status(msg)

    async def close(self) -> None:
        """Tear down resources."""
        await self._fetcher.close()
        self._cloner.cleanup()

    # ── Full run ──────────────────────────────────────────────────────────

    async def run(self) -> ReviewReport:
        """Run every check and return the combined report."""
        s = self.settings
        if s.local_path:
            self._status(f"Using local checkout {s.local_path} …")
            root = self._cloner.attach(s.local_path)
        else:
            self._status("Cloning repository …")
            root = self._cloner.clone(s.repo_url, s.branch)

        report = ReviewReport(repo_url=s.repo_url, branch=s.branch)

        self._status("Checking paper file …")
        report.paper = build_paper_report(root)

        self._status("Detecting license …")
        report.license = await self._check_license(root)

        self._status("Measuring language composition …")
        report.languages = build_language_report(root)

        self._status("Analyzing commit history …")
        self._check_history(report)

        self._status("Fetching engagement metrics …")
        report.engagement = await self._check_engagement()

        self._status("Done!")
        return report

    def _check_history(self, report: ReviewReport) -> None:
        try:
            commits = extract_commit_timeline(self._cloner.repo)
        except HistoryBackendError as exc:
            logger.warning("Commit history analysis failed: %s", exc)
            report.history_error = str(exc)
            return
        report.history = build_history_report(commits)

    async def _check_license(self, root: Path) -> LicenseReport:
        parsed = parse_github_repo(self.settings.repo_url)
        if parsed is None or self.settings.local_path:
            return build_license_report(root)
        owner, repo = parsed
        try:
            payload = await self._fetcher.fetch_license(owner, repo, self.settings.branch)
        except httpx.HTTPError as exc:
            logger.warning(
                "GitHub license detection failed for %s/%s, reading the checkout: %s",
                owner, repo, exc,
            )
            return build_license_report(root)
        return license_report_from_github(payload)

    async def _check_engagement(self) -> EngagementReport:
        parsed = parse_github_repo(self.settings.repo_url)
        if parsed is None:
            return EngagementReport(error="not a GitHub repository")
        owner, repo = parsed
        try:
            info = await self._fetcher.fetch_repo_info(owner, repo)
            issues = await self._fetcher.fetch_issues(owner, repo)
            prs = await self._fetcher.fetch_pull_requests(owner, repo)
        except httpx.HTTPError as exc:
            logger.warning("Engagement polling failed for %s/%s: %s", owner, repo, exc)
            return EngagementReport(error=f"GitHub API error: {exc}")
        return build_engagement_report(info, issues, prs)

    # ── Publishing ────────────────────────────────────────────────────────

    async def publish(self, report: ReviewReport) -> None:
        """Post each section as a comment and label the issue with top languages."""
        s = self.settings
        if not s.can_post:
            raise ConfigurationError(
                "Cannot post without an issue id and reviews repo",
                {"issue_id": str(s.issue_id), "reviews_repo": str(s.reviews_repo)},
            )
        owner, repo = s.reviews_repo.split("/", 1)  # type: ignore[union-attr]

        comments = render_comments(report)
        for section in ("paper", "license", "history", "engagement"):
            self._status(f"Posting {section} comment …")
            await self._fetcher.post_issue_comment(owner, repo, s.issue_id, comments[section])  # type: ignore[arg-type]

        labels = report.languages.top(LANGUAGE_LABEL_COUNT)
        if labels:
            self._status("Labelling issue with top languages …")
            await self._fetcher.add_issue_labels(owner, repo, s.issue_id, labels)  # type: ignore[arg-type]

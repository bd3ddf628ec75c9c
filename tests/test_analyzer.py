"""Tests for the submission checks orchestrator."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from submission_checks.analyzer import SubmissionChecker
from submission_checks.config import ReviewSettings
from submission_checks.exceptions import ConfigurationError, HistoryBackendError
from submission_checks.models import (
    EngagementReport,
    LanguageReport,
    LanguageShare,
    ReviewReport,
)

T0 = datetime(2024, 6, 1, tzinfo=timezone.utc)
MIT = "Permission is hereby granted, free of charge, to any person"


def _settings(**kw) -> ReviewSettings:
    values = {"repo_url": "https://github.com/owner/tool"}
    values.update(kw)
    return ReviewSettings(**values)


@pytest.fixture
def submission(git_repo):
    """A small submitted repository with a paper, a license and one code dump."""
    git_repo.commit({"LICENSE": MIT + "\n", "paper.md": "# Statement of need\n\nWe need it.\n"}, T0)
    git_repo.commit({"tool.py": "print(1)\n" * 5}, T0 + timedelta(days=10))
    git_repo.commit({"lib.py": "x = 1\n" * 95}, T0 + timedelta(days=30))
    return git_repo


def _no_network(checker: SubmissionChecker) -> None:
    checker._fetcher = MagicMock()
    checker._fetcher.fetch_repo_info = AsyncMock(return_value={"stargazers_count": 3, "forks_count": 1})
    checker._fetcher.fetch_license = AsyncMock(
        return_value={"path": "LICENSE", "license": {"name": "MIT License", "spdx_id": "MIT"}}
    )
    checker._fetcher.fetch_issues = AsyncMock(return_value=[])
    checker._fetcher.fetch_pull_requests = AsyncMock(return_value=[])
    checker._fetcher.post_issue_comment = AsyncMock()
    checker._fetcher.add_issue_labels = AsyncMock()
    checker._fetcher.close = AsyncMock()


class TestSubmissionCheckerInit:
    def test_on_status_callback(self):
        messages = []
        checker = SubmissionChecker(_settings(), on_status=messages.append)
        checker._status("hello")
        assert messages == ["hello"]

    def test_default_on_status(self):
        SubmissionChecker(_settings())._status("no-op")  # should not raise

    def test_token_passed_through(self):
        checker = SubmissionChecker(_settings(token="tok"))
        assert checker._fetcher.token == "tok"
        assert checker._cloner.token == "tok"


class TestRun:
    @pytest.mark.asyncio
    async def test_full_run_on_local_checkout(self, submission):
        messages = []
        checker = SubmissionChecker(
            _settings(local_path=str(submission.path)), on_status=messages.append
        )
        _no_network(checker)
        report = await checker.run()
        await checker.close()

        assert report.paper.found and report.paper.has_statement_of_need
        assert report.license.spdx_id == "MIT"
        assert report.languages.top() == ["Python"]
        assert report.history.commit_count == 3
        assert report.history.total_insertions == 100
        assert report.history.first_commit_date == T0
        top = report.history.windows[0]
        assert top.percentage == 95.0
        assert top.signal.value == "critical"
        assert report.engagement.available and report.engagement.stars == 3
        assert report.history_error == ""
        assert messages[-1] == "Done!"

    @pytest.mark.asyncio
    async def test_clones_when_no_local_path(self, submission):
        checker = SubmissionChecker(_settings(branch="joss"))
        _no_network(checker)
        with patch.object(checker._cloner, "clone", return_value=submission.path) as mock_clone:
            checker._cloner._repo = submission.repo
            report = await checker.run()
        mock_clone.assert_called_once_with("https://github.com/owner/tool", "joss")
        assert report.branch == "joss"

    @pytest.mark.asyncio
    async def test_history_failure_is_recorded(self, submission):
        checker = SubmissionChecker(_settings(local_path=str(submission.path)))
        _no_network(checker)
        with patch(
            "submission_checks.analyzer.extract_commit_timeline",
            side_effect=HistoryBackendError("git diff failed"),
        ):
            report = await checker.run()
        await checker.close()
        assert report.history_error == "git diff failed"
        assert report.history.windows == []

    @pytest.mark.asyncio
    async def test_engagement_failure_is_recorded(self, submission):
        checker = SubmissionChecker(_settings(local_path=str(submission.path)))
        _no_network(checker)
        checker._fetcher.fetch_repo_info = AsyncMock(side_effect=httpx.ConnectError("offline"))
        report = await checker.run()
        await checker.close()
        assert not report.engagement.available
        assert "offline" in report.engagement.error

    @pytest.mark.asyncio
    async def test_engagement_skipped_for_other_forges(self, submission):
        checker = SubmissionChecker(
            _settings(repo_url="https://gitlab.com/o/r", local_path=str(submission.path))
        )
        _no_network(checker)
        report = await checker.run()
        await checker.close()
        checker._fetcher.fetch_repo_info.assert_not_called()
        assert report.engagement.error == "not a GitHub repository"


class TestLicenseCheck:
    @pytest.mark.asyncio
    async def test_github_license_api_for_clones(self, submission):
        checker = SubmissionChecker(_settings(branch="joss"))
        _no_network(checker)
        checker._fetcher.fetch_license = AsyncMock(
            return_value={"path": "COPYING", "license": {"name": "Other", "spdx_id": "NOASSERTION"}}
        )
        report = await checker._check_license(submission.path)
        checker._fetcher.fetch_license.assert_awaited_once_with("owner", "tool", "joss")
        assert report.found
        assert report.name == "Other"
        assert report.osi_approved is None

    @pytest.mark.asyncio
    async def test_no_license_on_github(self, submission):
        checker = SubmissionChecker(_settings())
        _no_network(checker)
        checker._fetcher.fetch_license = AsyncMock(return_value=None)
        report = await checker._check_license(submission.path)
        assert not report.found

    @pytest.mark.asyncio
    async def test_api_failure_falls_back_to_checkout(self, submission):
        checker = SubmissionChecker(_settings())
        _no_network(checker)
        checker._fetcher.fetch_license = AsyncMock(side_effect=httpx.ConnectError("offline"))
        report = await checker._check_license(submission.path)
        assert report.spdx_id == "MIT"
        assert report.path == "LICENSE"

    @pytest.mark.asyncio
    async def test_local_checkout_reads_files(self, submission):
        checker = SubmissionChecker(_settings(local_path=str(submission.path)))
        _no_network(checker)
        report = await checker._check_license(submission.path)
        checker._fetcher.fetch_license.assert_not_called()
        assert report.spdx_id == "MIT"

    @pytest.mark.asyncio
    async def test_other_forges_read_files(self, submission):
        checker = SubmissionChecker(_settings(repo_url="https://gitlab.com/o/r"))
        _no_network(checker)
        report = await checker._check_license(submission.path)
        checker._fetcher.fetch_license.assert_not_called()
        assert report.spdx_id == "MIT"


class TestPublish:
    def _report(self) -> ReviewReport:
        return ReviewReport(
            repo_url="https://github.com/owner/tool",
            languages=LanguageReport(
                languages=[
                    LanguageShare(name=n, bytes=10, percentage=25.0)
                    for n in ("Python", "C", "Shell", "TeX")
                ]
            ),
            engagement=EngagementReport(available=True),
        )

    @pytest.mark.asyncio
    async def test_posts_comments_and_labels(self):
        checker = SubmissionChecker(_settings(issue_id=42, reviews_repo="org/reviews"))
        _no_network(checker)
        await checker.publish(self._report())

        posts = checker._fetcher.post_issue_comment.await_args_list
        assert len(posts) == 4
        assert all(call.args[:3] == ("org", "reviews", 42) for call in posts)
        assert posts[0].args[3].startswith("**Paper file info**")
        assert posts[1].args[3].startswith("**License info**")
        assert posts[2].args[3].startswith("**Commit history**")
        checker._fetcher.add_issue_labels.assert_awaited_once_with(
            "org", "reviews", 42, ["Python", "C", "Shell"]
        )

    @pytest.mark.asyncio
    async def test_no_labels_without_languages(self):
        checker = SubmissionChecker(_settings(issue_id=42, reviews_repo="org/reviews"))
        _no_network(checker)
        await checker.publish(ReviewReport(repo_url="https://github.com/owner/tool"))
        checker._fetcher.add_issue_labels.assert_not_called()

    @pytest.mark.asyncio
    async def test_requires_issue(self):
        checker = SubmissionChecker(_settings())
        _no_network(checker)
        with pytest.raises(ConfigurationError):
            await checker.publish(self._report())

"""Tests for the CLI entry point."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from submission_checks.cli import app
from submission_checks.models import ReviewReport

runner = CliRunner()

T0 = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("REPO_URL", "PAPER_BRANCH", "ISSUE_ID", "REVIEWS_REPO", "GITHUB_TOKEN", "GH_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **k: False)


def _mock_checker(report: ReviewReport) -> MagicMock:
    checker = MagicMock()
    checker.run = AsyncMock(return_value=report)
    checker.publish = AsyncMock()
    checker.close = AsyncMock()
    return checker


class TestWindowsCommand:
    def test_prints_windows(self, git_repo):
        git_repo.commit({"a.txt": "a\n"}, T0)
        git_repo.commit({"b.txt": "b\n" * 3}, T0 + timedelta(days=1))
        git_repo.commit({"c.txt": "c\n" * 97}, T0 + timedelta(days=20))
        result = runner.invoke(app, ["windows", str(git_repo.path)])
        assert result.exit_code == 0, result.output
        assert "Inserted lines" in result.output
        assert "critical" in result.output
        assert "97.0%" in result.output

    def test_no_windows(self, git_repo):
        git_repo.commit({"a.txt": "a\n"}, T0)
        result = runner.invoke(app, ["windows", str(git_repo.path)])
        assert result.exit_code == 0
        assert "No bulk contribution windows found" in result.output

    def test_backend_failure_exit_code(self, tmp_path):
        result = runner.invoke(app, ["windows", str(tmp_path)])
        assert result.exit_code == 1
        assert "Unable to analyze commit history" in result.output


class TestRunCommand:
    def test_missing_repo_url(self):
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 2
        assert "repo_url" in result.output

    def test_dry_run_prints_comments(self):
        checker = _mock_checker(ReviewReport(repo_url="https://github.com/o/r"))
        with patch("submission_checks.analyzer.SubmissionChecker", return_value=checker):
            result = runner.invoke(
                app,
                ["run", "--repo-url", "https://github.com/o/r", "--issue-id", "5",
                 "--reviews-repo", "org/reviews", "--dry-run"],
            )
        assert result.exit_code == 0, result.output
        assert "Paper file info" in result.output
        checker.publish.assert_not_called()
        checker.close.assert_awaited_once()

    def test_posts_when_issue_given(self):
        checker = _mock_checker(ReviewReport(repo_url="https://github.com/o/r"))
        with patch("submission_checks.analyzer.SubmissionChecker", return_value=checker):
            result = runner.invoke(
                app,
                ["run", "--repo-url", "https://github.com/o/r", "--issue-id", "5",
                 "--reviews-repo", "org/reviews"],
            )
        assert result.exit_code == 0, result.output
        checker.publish.assert_awaited_once()
        assert "Posted review comments on org/reviews#5" in result.output

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("REPO_URL", "https://github.com/env/repo")
        checker = _mock_checker(ReviewReport(repo_url="https://github.com/env/repo"))
        with patch("submission_checks.analyzer.SubmissionChecker", return_value=checker) as cls:
            result = runner.invoke(app, ["run"])
        assert result.exit_code == 0, result.output
        settings = cls.call_args[0][0]
        assert settings.repo_url == "https://github.com/env/repo"

    def test_checker_error_exit_code(self):
        from submission_checks.exceptions import CloneError

        checker = _mock_checker(ReviewReport(repo_url="https://github.com/o/r"))
        checker.run = AsyncMock(side_effect=CloneError("Could not clone repository"))
        with patch("submission_checks.analyzer.SubmissionChecker", return_value=checker):
            result = runner.invoke(app, ["run", "--repo-url", "https://github.com/o/r"])
        assert result.exit_code == 1
        assert "Could not clone repository" in result.output


class TestPreviewCommand:
    def test_launches_app(self):
        mock_app_instance = MagicMock()
        with patch("submission_checks.app.ChecksPreviewApp", return_value=mock_app_instance) as cls:
            result = runner.invoke(app, ["preview", "--repo-url", "https://github.com/o/r"])
        assert result.exit_code == 0, result.output
        assert cls.call_args[0][0].repo_url == "https://github.com/o/r"
        mock_app_instance.run.assert_called_once()


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "submission-checks" in result.output

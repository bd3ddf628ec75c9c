"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

import git
import pytest

from submission_checks.models import Commit

BASE_DATE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


@pytest.fixture
def make_commits():
    """Build a timeline from ``(hours after BASE_DATE, insertions)`` pairs."""

    def _make(points: list[tuple[float, int]]) -> list[Commit]:
        return [
            Commit(
                sha=f"{i:02d}" + "a" * 38,
                date=BASE_DATE + timedelta(hours=hours),
                insertions=insertions,
            )
            for i, (hours, insertions) in enumerate(points)
        ]

    return _make


class GitRepoBuilder:
    """Creates commits with fixed dates in a throwaway repository."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = git.Repo.init(path)
        self.actor = git.Actor("Test Author", "author@example.com")

    def commit(
        self,
        files: dict[str, Union[str, bytes]],
        when: datetime,
        message: str = "commit",
        parents: Optional[list[git.Commit]] = None,
    ) -> git.Commit:
        for name, content in files.items():
            fp = self.path / name
            fp.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                fp.write_bytes(content)
            else:
                fp.write_text(content)
        self.repo.index.add(list(files))
        date = f"{int(when.timestamp())} +0000"
        return self.repo.index.commit(
            message,
            parent_commits=parents,
            author=self.actor,
            committer=self.actor,
            author_date=date,
            commit_date=date,
        )


@pytest.fixture
def git_repo(tmp_path):
    """An empty git repository with a commit helper."""
    builder = GitRepoBuilder(tmp_path / "repo")
    yield builder
    builder.repo.close()

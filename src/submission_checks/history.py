"""Commit timeline extraction from a local git repository (GitPython)."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import git  # GitPython

from submission_checks.exceptions import HistoryBackendError
from submission_checks.models import Commit

logger = logging.getLogger(__name__)


def open_repository(path: Union[str, Path]) -> git.Repo:
    """Open an existing checkout, wrapping GitPython failures."""
    try:
        return git.Repo(str(path))
    except (git.exc.NoSuchPathError, git.exc.InvalidGitRepositoryError) as exc:
        raise HistoryBackendError(
            "Not a readable git repository", {"path": str(path)}
        ) from exc


def parse_numstat(output: str) -> int:
    """Sum added lines from ``git diff --numstat`` output.

    Binary files are reported as ``-\\t-\\tpath`` and count as zero.
    """
    total = 0
    for line in output.splitlines():
        parts = line.split("\t", 2)
        if len(parts) < 3:
            continue
        added = parts[0].strip()
        if added == "-":
            continue
        try:
            total += int(added)
        except ValueError as exc:
            raise HistoryBackendError(
                "Unexpected numstat line", {"line": line}
            ) from exc
    return total


def count_insertions(repo: git.Repo, parent_sha: str, sha: str) -> int:
    """Lines inserted by ``sha`` relative to ``parent_sha``."""
    try:
        output = repo.git.diff(parent_sha, sha, "--", numstat=True, no_renames=True)
    except git.exc.GitCommandError as exc:
        raise HistoryBackendError(
            "git diff failed", {"parent": parent_sha[:7], "commit": sha[:7]}
        ) from exc
    return parse_numstat(output)


def extract_commit_timeline(repo: git.Repo, ref: str = "HEAD") -> list[Commit]:
    """Walk every commit reachable from ``ref``, oldest first.

    Each non-root commit is diffed once against its first parent; merge
    commits' other parents are ignored. Root commits are kept in the
    timeline with zero insertions. Ties on the commit timestamp keep
    topological order.
    """
    if ref == "HEAD" and not repo.head.is_valid():
        # Unborn branch: no commits yet
        return []
    try:
        raw_commits = list(repo.iter_commits(ref))
    except (git.exc.GitCommandError, git.exc.BadName, ValueError) as exc:
        raise HistoryBackendError(
            "Could not enumerate commits", {"ref": ref}
        ) from exc

    raw_commits.reverse()  # oldest → newest

    timeline: list[Commit] = []
    for c in raw_commits:
        date = c.committed_datetime.astimezone(timezone.utc)
        if not c.parents:
            timeline.append(Commit(sha=c.hexsha, date=date, is_root=True))
            continue
        insertions = count_insertions(repo, c.parents[0].hexsha, c.hexsha)
        timeline.append(Commit(sha=c.hexsha, date=date, insertions=insertions))

    timeline.sort(key=lambda commit: commit.date)
    logger.debug("Extracted %d commits from %s", len(timeline), ref)
    return timeline


def first_commit_date(commits: list[Commit]) -> Optional[datetime]:
    """Timestamp of the earliest commit in the timeline."""
    if not commits:
        return None
    return min(c.date for c in commits)

"""Bulk contributions — 48-hour windows holding a large share of inserted lines.

Flags "code dumps": periods in which an unusually large fraction of all
lines ever inserted into the repository appeared at once.
"""

import logging
from collections import deque
from datetime import timedelta
from typing import Optional

from submission_checks.history import first_commit_date
from submission_checks.models import (
    Commit,
    CommitHistoryReport,
    ContributionWindow,
    Signal,
)

logger = logging.getLogger(__name__)

WINDOW_SPAN = timedelta(hours=48)
MAX_WINDOWS = 3

# Lower bound (inclusive) of each tier, highest first
SIGNAL_THRESHOLDS: list[tuple[float, Signal]] = [
    (75.0, Signal.critical),
    (50.0, Signal.strong),
    (25.0, Signal.moderate),
]


def total_insertions(commits: list[Commit]) -> int:
    """Repository-wide inserted lines; the denominator for every window."""
    return sum(c.insertions for c in commits)


def classify_signal(percentage: float) -> Signal:
    """Map a window's share of total insertions to a severity tier."""
    for threshold, signal in SIGNAL_THRESHOLDS:
        if percentage >= threshold:
            return signal
    return Signal.healthy


def scan_windows(
    commits: list[Commit],
    total: int,
    span: timedelta = WINDOW_SPAN,
) -> list[ContributionWindow]:
    """Build one candidate window per anchor commit, in anchor order.

    ``commits`` must be sorted by date. The window anchored at commit ``c``
    covers ``[c.date - span, c.date]`` (both ends inclusive), so commits
    sharing the anchor's timestamp are inside it even when they come later
    in the sequence. Anchors whose window holds no inserted lines are
    skipped, as are windows whose share rounds to 0.0%.

    Two pointers sweep the sequence once; ``contributing`` holds indices of
    in-window commits with insertions so the first/last sha are at its ends.
    """
    if total <= 0:
        return []

    windows: list[ContributionWindow] = []
    contributing: deque[int] = deque()
    running = 0
    right = 0  # next commit not yet inside the window

    for anchor in commits:
        end = anchor.date
        start = end - span

        while right < len(commits) and commits[right].date <= end:
            if commits[right].insertions > 0:
                contributing.append(right)
                running += commits[right].insertions
            right += 1

        while contributing and commits[contributing[0]].date < start:
            running -= commits[contributing.popleft()].insertions

        if running == 0:
            continue

        percentage = round(running / total * 100, 1)
        if percentage <= 0.0:
            continue

        windows.append(
            ContributionWindow(
                start=start,
                end=end,
                insertions=running,
                percentage=percentage,
                first_sha=commits[contributing[0]].sha,
                last_sha=commits[contributing[-1]].sha,
            )
        )
    return windows


def select_windows(
    candidates: list[ContributionWindow],
    limit: int = MAX_WINDOWS,
) -> list[ContributionWindow]:
    """Greedily keep the highest-percentage windows that do not overlap.

    Percentage-first, not a maximum-count interval schedule: a lower
    window overlapping an accepted one is dropped even if that leaves
    fewer than ``limit`` results. Ties keep candidate order.
    """
    ranked = sorted(candidates, key=lambda w: -w.percentage)
    selected: list[ContributionWindow] = []
    for window in ranked:
        if len(selected) >= limit:
            break
        if any(window.overlaps(kept) for kept in selected):
            continue
        selected.append(window)
    return selected


def detect_bulk_windows(commits: list[Commit]) -> list[ContributionWindow]:
    """Top non-overlapping bulk-contribution windows, severity-tagged.

    Returns an empty list for fewer than two commits or a history with no
    inserted lines.
    """
    if len(commits) < 2:
        return []

    total = total_insertions(commits)
    if total == 0:
        return []

    candidates = scan_windows(commits, total)
    selected = select_windows(candidates)
    for window in selected:
        window.signal = classify_signal(window.percentage)

    logger.debug(
        "%d candidate windows, %d selected (total insertions %d)",
        len(candidates), len(selected), total,
    )
    return selected


def build_history_report(
    commits: list[Commit],
    windows: Optional[list[ContributionWindow]] = None,
) -> CommitHistoryReport:
    """Assemble the commit-history section from an extracted timeline."""
    if windows is None:
        windows = detect_bulk_windows(commits)
    return CommitHistoryReport(
        commit_count=len(commits),
        total_insertions=total_insertions(commits),
        first_commit_date=first_commit_date(commits),
        windows=windows,
    )

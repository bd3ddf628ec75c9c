"""Markdown comment bodies for the review issue."""

import re
from typing import Optional

from submission_checks.models import (
    CommitHistoryReport,
    ContributionWindow,
    EngagementReport,
    LanguageReport,
    LicenseReport,
    PaperReport,
    ReviewReport,
    Signal,
)

OSI_LICENSES_URL = "https://opensource.org/licenses"

SIGNAL_ICONS: dict[Signal, str] = {
    Signal.critical: "🔴",
    Signal.strong: "🟠",
    Signal.moderate: "🟡",
    Signal.healthy: "🟢",
}

_GITHUB_REPO = re.compile(
    r"^(?:https?://|git@|ssh://git@)?(?:www\.)?github\.com[/:]"
    r"(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$",
    re.IGNORECASE,
)


def parse_github_repo(url: str) -> Optional[tuple[str, str]]:
    """Return ``(owner, repo)`` for a GitHub URL, None for anything else."""
    match = _GITHUB_REPO.match(url.strip())
    if not match:
        return None
    return match.group("owner"), match.group("repo")


# ── Commit history ────────────────────────────────────────────────────────

def format_period(window: ContributionWindow) -> str:
    """Human-readable UTC period of a window."""
    return f"{window.start:%Y-%m-%d %H:%M} → {window.end:%Y-%m-%d %H:%M} UTC"


def window_link(repo_url: str, window: ContributionWindow) -> Optional[str]:
    """Commit link for a single-commit window, compare link for a range."""
    parsed = parse_github_repo(repo_url)
    if parsed is None:
        return None
    owner, repo = parsed
    base = f"https://github.com/{owner}/{repo}"
    if window.is_single_commit:
        return f"{base}/commit/{window.first_sha}"
    return f"{base}/compare/{window.first_sha}^...{window.last_sha}"


def _window_row(repo_url: str, window: ContributionWindow) -> str:
    icon = SIGNAL_ICONS[window.signal]
    if window.is_single_commit:
        label = f"`{window.first_sha[:7]}`"
    else:
        label = f"`{window.first_sha[:7]}…{window.last_sha[:7]}`"
    link = window_link(repo_url, window)
    commits = f"[{label}]({link})" if link else label
    return (
        f"| {icon} {window.signal.value} | {format_period(window)} "
        f"| {window.insertions:,} | {window.percentage:.1f}% | {commits} |"
    )


def render_history(
    history: CommitHistoryReport, repo_url: str, error: str = ""
) -> str:
    lines = ["**Commit history**:", ""]
    if error:
        lines.append(f"⚠️ Unable to analyze the commit history: {error}")
        return "\n".join(lines) + "\n"

    if history.first_commit_date:
        lines.append(f"📅 First commit: **{history.first_commit_date:%Y-%m-%d}**")
        lines.append("")
    lines.append(
        f"🧮 Commits: **{history.commit_count:,}** · "
        f"Inserted lines: **{history.total_insertions:,}**"
    )
    lines.append("")

    if not history.windows:
        if history.commit_count < 2 or history.total_insertions == 0:
            lines.append("ℹ️ Not enough history to look for bulk contributions")
        else:
            lines.append("✅ No bulk contribution windows found")
        return "\n".join(lines) + "\n"

    lines += [
        "**Bulk contributions** (48-hour periods with the largest share of inserted lines):",
        "",
        "| Signal | Period | Inserted lines | Share | Commits |",
        "|---|---|---|---|---|",
    ]
    lines += [_window_row(repo_url, w) for w in history.windows]
    return "\n".join(lines) + "\n"


# ── Paper / license / languages / engagement ─────────────────────────────

def render_paper(paper: PaperReport, repo_url: str, branch: Optional[str] = None) -> str:
    if not paper.found:
        msg = f"**Paper file info**:\n\n⚠️ Failed to find a paper file in {repo_url}"
        if branch:
            msg += f" (branch: {branch})"
        return msg

    word_count_msg = f"📄 Wordcount for `{paper.filename}` is **{paper.word_count}**"
    if paper.has_statement_of_need:
        need_msg = "✅ The paper includes a `Statement of need` section"
    else:
        need_msg = "🔴 Failed to discover a `Statement of need` section in paper"
    return f"**Paper file info**:\n\n{word_count_msg}\n\n{need_msg}\n\n"


def render_license(lic: LicenseReport) -> str:
    if not lic.found:
        msg = "🔴 Failed to discover a valid open source license"
    elif lic.osi_approved is True:
        msg = (
            f"✅ License found: `{lic.name}` "
            f"(Valid open source [OSI approved]({OSI_LICENSES_URL}) license)"
        )
    elif lic.osi_approved is False:
        msg = f"🔴 License found: `{lic.name}` (Not [OSI approved]({OSI_LICENSES_URL}))"
    else:
        msg = f"🟡 License found: `{lic.name}` ([Check here]({OSI_LICENSES_URL}) for OSI approval)"
    return f"**License info**:\n\n{msg}\n\n"


def render_languages(languages: LanguageReport) -> str:
    lines = ["**Languages**:", ""]
    if not languages.languages:
        lines.append("⚠️ No source files in a recognized language")
    else:
        for lang in languages.languages[:10]:
            lines.append(f"- {lang.name}: {lang.percentage:.1f}%")
    return "\n".join(lines) + "\n"


def render_engagement(engagement: EngagementReport) -> str:
    lines = ["**Engagement**:", ""]
    if not engagement.available:
        note = engagement.error or "only available for GitHub repositories"
        lines.append(f"⚠️ Engagement metrics unavailable ({note})")
        return "\n".join(lines) + "\n"
    lines += [
        f"⭐ Stars: **{engagement.stars}** · 🍴 Forks: **{engagement.forks}** · "
        f"👀 Watchers: **{engagement.watchers}**",
        "",
        f"🐛 Issues: **{engagement.issues_total}** "
        f"({engagement.open_issues} open, {engagement.issues_closed} closed)",
        "",
        f"🔀 Pull requests: **{engagement.pull_requests_total}** "
        f"({engagement.pull_requests_merged} merged)",
    ]
    return "\n".join(lines) + "\n"


def render_comments(report: ReviewReport) -> dict[str, str]:
    """All comment bodies, keyed by section, in posting order."""
    return {
        "paper": render_paper(report.paper, report.repo_url, report.branch),
        "license": render_license(report.license),
        "languages": render_languages(report.languages),
        "history": render_history(report.history, report.repo_url, report.history_error),
        "engagement": render_engagement(report.engagement),
    }

"""Engagement — stars, forks and issue/PR activity on the forge."""

from submission_checks.models import EngagementReport, Issue, PullRequest


def build_engagement_report(
    repo_info: dict,
    issues: list[Issue],
    prs: list[PullRequest],
) -> EngagementReport:
    """Summarize external engagement from raw GitHub data."""
    return EngagementReport(
        available=True,
        stars=repo_info.get("stargazers_count", 0),
        forks=repo_info.get("forks_count", 0),
        watchers=repo_info.get("subscribers_count", repo_info.get("watchers_count", 0)),
        open_issues=sum(1 for i in issues if i.state == "open"),
        issues_total=len(issues),
        issues_closed=sum(1 for i in issues if i.closed_at is not None),
        pull_requests_total=len(prs),
        pull_requests_merged=sum(1 for pr in prs if pr.merged_at is not None),
    )

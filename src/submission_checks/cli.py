"""CLI entry point for submission-checks."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from submission_checks import __version__
from submission_checks.analysis.bulk_contributions import build_history_report
from submission_checks.config import ReviewSettings
from submission_checks.exceptions import (
    ConfigurationError,
    HistoryBackendError,
    SubmissionChecksError,
)
from submission_checks.history import extract_commit_timeline, open_repository
from submission_checks.logging_config import setup_logging
from submission_checks.models import ReviewReport
from submission_checks.report import SIGNAL_ICONS, format_period, render_comments

app = typer.Typer(
    name="submission-checks",
    help="Automated repository checks for peer-review submissions.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"submission-checks {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Errors only"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Append logs to a file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Load ``.env`` and configure logging before any command."""
    from dotenv import load_dotenv

    load_dotenv()  # e.g. GITHUB_TOKEN, REPO_URL, ISSUE_ID
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)


def _settings(**overrides: object) -> ReviewSettings:
    try:
        return ReviewSettings.from_env(**overrides)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=2)


async def _run_checks(settings: ReviewSettings, post: bool) -> ReviewReport:
    from submission_checks.analyzer import SubmissionChecker

    checker = SubmissionChecker(
        settings, on_status=lambda msg: console.print(f"[dim]{msg}[/dim]")
    )
    try:
        report = await checker.run()
        if post:
            await checker.publish(report)
        return report
    finally:
        await checker.close()


@app.command()
def run(
    repo_url: Optional[str] = typer.Option(None, "--repo-url", help="Submitted repository URL [env: REPO_URL]"),
    branch: Optional[str] = typer.Option(None, "--branch", help="Branch holding the paper [env: PAPER_BRANCH]"),
    issue_id: Optional[int] = typer.Option(None, "--issue-id", help="Review issue number [env: ISSUE_ID]"),
    reviews_repo: Optional[str] = typer.Option(None, "--reviews-repo", help="owner/name of the reviews repo [env: REVIEWS_REPO]"),
    path: Optional[Path] = typer.Option(None, "--path", help="Use an existing checkout instead of cloning"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print comments instead of posting them"),
) -> None:
    """Run every check and post the results on the review issue."""
    settings = _settings(
        repo_url=repo_url,
        branch=branch,
        issue_id=issue_id,
        reviews_repo=reviews_repo,
        local_path=str(path) if path else None,
    )
    post = settings.can_post and not dry_run
    try:
        report = asyncio.run(_run_checks(settings, post))
    except SubmissionChecksError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)

    if post:
        console.print(f"[green]✅ Posted review comments on {settings.reviews_repo}#{settings.issue_id}[/green]")
        return
    for body in render_comments(report).values():
        console.print(Markdown(body))
        console.rule()


@app.command()
def windows(
    path: Path = typer.Argument(Path("."), help="Local git repository"),
    ref: str = typer.Option("HEAD", "--ref", help="Branch, tag or commit to walk"),
) -> None:
    """Show bulk-contribution windows for a local repository."""
    try:
        commits = extract_commit_timeline(open_repository(path), ref)
    except HistoryBackendError as e:
        console.print(f"[red]❌ Unable to analyze commit history: {e}[/red]")
        raise typer.Exit(code=1)

    history = build_history_report(commits)
    console.print(
        f"Commits: [bold]{history.commit_count}[/bold] · "
        f"Inserted lines: [bold]{history.total_insertions:,}[/bold]"
    )
    if not history.windows:
        console.print("No bulk contribution windows found.")
        return

    table = Table(title="Bulk contributions (48h windows)")
    table.add_column("Signal")
    table.add_column("Period")
    table.add_column("Inserted lines", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Commits")
    for w in history.windows:
        table.add_row(
            f"{SIGNAL_ICONS[w.signal]} {w.signal.value}",
            format_period(w),
            f"{w.insertions:,}",
            f"{w.percentage:.1f}%",
            w.first_sha[:7] if w.is_single_commit else f"{w.first_sha[:7]}…{w.last_sha[:7]}",
        )
    console.print(table)


@app.command()
def preview(
    repo_url: Optional[str] = typer.Option(None, "--repo-url", help="Submitted repository URL [env: REPO_URL]"),
    branch: Optional[str] = typer.Option(None, "--branch", help="Branch holding the paper [env: PAPER_BRANCH]"),
    path: Optional[Path] = typer.Option(None, "--path", help="Use an existing checkout instead of cloning"),
) -> None:
    """Open the interactive preview of the review comments."""
    settings = _settings(
        repo_url=repo_url, branch=branch, local_path=str(path) if path else None
    )

    from submission_checks.app import ChecksPreviewApp

    ChecksPreviewApp(settings).run()


def main() -> None:
    app()


if __name__ == "__main__":
    main()

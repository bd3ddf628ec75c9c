"""Data models for submission-checks."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ── Commit history ────────────────────────────────────────────────────────

class Commit(BaseModel):
    """One commit on the walked branch, with its first-parent insertions."""

    sha: str
    short_sha: str = ""
    date: datetime
    insertions: int = Field(default=0, ge=0)
    is_root: bool = False

    def model_post_init(self, _ctx: object) -> None:
        if not self.short_sha:
            self.short_sha = self.sha[:7]


class Signal(str, Enum):
    """Severity tier of a bulk-contribution window."""

    critical = "critical"
    strong = "strong"
    moderate = "moderate"
    healthy = "healthy"


class ContributionWindow(BaseModel):
    """A 48-hour trailing window anchored at one commit's timestamp."""

    start: datetime
    end: datetime
    insertions: int
    percentage: float
    first_sha: str
    last_sha: str
    signal: Signal = Signal.healthy

    def overlaps(self, other: "ContributionWindow") -> bool:
        """True if the two closed intervals share any instant."""
        return self.start <= other.end and other.start <= self.end

    @property
    def is_single_commit(self) -> bool:
        return self.first_sha == self.last_sha


class CommitHistoryReport(BaseModel):
    """Commit-history section of the review report."""

    commit_count: int = 0
    total_insertions: int = 0
    first_commit_date: Optional[datetime] = None
    windows: list[ContributionWindow] = Field(default_factory=list)


# ── Paper ────────────────────────────────────────────────────────────────

class PaperReport(BaseModel):
    """Paper file discovery and basic content checks."""

    found: bool = False
    path: Optional[str] = None
    word_count: int = 0
    has_statement_of_need: bool = False

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1] if self.path else ""


# ── License ──────────────────────────────────────────────────────────────

class LicenseReport(BaseModel):
    """Detected license and its OSI approval status."""

    found: bool = False
    path: Optional[str] = None
    name: str = ""
    spdx_id: str = ""
    osi_approved: Optional[bool] = None  # None = unknown


# ── Languages ────────────────────────────────────────────────────────────

class LanguageShare(BaseModel):
    """Bytes of source attributed to one language."""

    name: str
    bytes: int = 0
    percentage: float = 0.0


class LanguageReport(BaseModel):
    """Language composition, largest first."""

    languages: list[LanguageShare] = Field(default_factory=list)

    def top(self, count: int = 3) -> list[str]:
        return [lang.name for lang in self.languages[:count]]


# ── Forge engagement ─────────────────────────────────────────────────────

class Issue(BaseModel):
    """A GitHub Issue."""

    number: int
    title: str
    author: str
    state: str = "open"
    created_at: datetime
    closed_at: Optional[datetime] = None
    url: str


class PullRequest(BaseModel):
    """A GitHub Pull Request."""

    number: int
    title: str
    author: str
    created_at: datetime
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    url: str


class EngagementReport(BaseModel):
    """External engagement with the submitted repository."""

    available: bool = False
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    issues_total: int = 0
    issues_closed: int = 0
    pull_requests_total: int = 0
    pull_requests_merged: int = 0
    error: str = ""


# ── Full review report ───────────────────────────────────────────────────

class ReviewReport(BaseModel):
    """Complete result of the submission checks."""

    repo_url: str
    branch: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.now)
    paper: PaperReport = Field(default_factory=PaperReport)
    license: LicenseReport = Field(default_factory=LicenseReport)
    languages: LanguageReport = Field(default_factory=LanguageReport)
    history: CommitHistoryReport = Field(default_factory=CommitHistoryReport)
    history_error: str = ""
    engagement: EngagementReport = Field(default_factory=EngagementReport)

"""Results screen — one tab per review comment, rendered as markdown."""

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, Markdown, Static, TabbedContent, TabPane

from submission_checks.models import ReviewReport
from submission_checks.report import render_comments

TAB_TITLES: dict[str, str] = {
    "paper": "📄 Paper",
    "license": "⚖ License",
    "languages": "🗂 Languages",
    "history": "🕰 Commit History",
    "engagement": "⭐ Engagement",
}


class ResultsScreen(Screen):
    """Preview of every comment that would be posted on the review issue."""

    CSS = """
    ResultsScreen {
        layout: vertical;
    }
    #results-header {
        height: 3;
        background: $primary;
        color: $text;
        text-align: center;
        padding: 1 2;
        text-style: bold;
    }
    """

    BINDINGS = [
        ("q", "app.quit", "Quit"),
    ]

    def __init__(self, report: ReviewReport, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.report = report

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        branch = f" ({self.report.branch})" if self.report.branch else ""
        yield Static(f"  📊  {self.report.repo_url}{branch}  ", id="results-header")

        comments = render_comments(self.report)
        with TabbedContent():
            for section, body in comments.items():
                with TabPane(TAB_TITLES[section], id=f"tab-{section}"):
                    with VerticalScroll():
                        yield Markdown(body)
        yield Footer()

"""Textual preview of the review comments, before anything is posted."""

import httpx
from textual.app import App

from submission_checks.analyzer import SubmissionChecker
from submission_checks.config import ReviewSettings
from submission_checks.exceptions import SubmissionChecksError
from submission_checks.models import ReviewReport
from submission_checks.screens.loading import LoadingScreen
from submission_checks.screens.results import ResultsScreen


class ChecksPreviewApp(App):
    """TUI showing what the bot would comment on the review issue."""

    TITLE = "Submission Checks"
    SUB_TITLE = "Paper · License · Languages · History · Engagement"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, settings: ReviewSettings, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.settings = settings

    def on_mount(self) -> None:
        loading = LoadingScreen()
        self.push_screen(loading)
        self.run_checks(loading)

    def run_checks(self, loading: LoadingScreen) -> None:
        """Run the checks in a worker thread, reporting progress."""

        async def _do_work() -> None:
            status_counter = {"n": 0}
            total_steps = 7

            def on_status(msg: str) -> None:
                status_counter["n"] += 1
                pct = min(int(status_counter["n"] / total_steps * 100), 95)
                self.call_from_thread(loading.update_status, msg, pct)

            checker = SubmissionChecker(self.settings, on_status=on_status)
            try:
                report = await checker.run()
                self.call_from_thread(loading.update_status, "Complete!", 100)
                self.call_from_thread(self._show_results, report)
            except SubmissionChecksError as e:
                self.call_from_thread(loading.update_status, f"❌ {e}", None)
                self.call_from_thread(loading.set_phase, "Press  q  to quit.")
            except httpx.HTTPError as e:
                self.call_from_thread(loading.update_status, f"❌ GitHub API error: {e}", None)
                self.call_from_thread(loading.set_phase, "Press  q  to quit.")
            finally:
                await checker.close()

        self.run_worker(_do_work(), thread=True)

    def _show_results(self, report: ReviewReport) -> None:
        """Replace loading screen with results."""
        self.pop_screen()
        self.push_screen(ResultsScreen(report))

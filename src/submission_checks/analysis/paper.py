"""Paper file info — locate the paper and check its basic shape."""

import re
from pathlib import Path
from typing import Optional

from submission_checks.models import PaperReport

PAPER_FILENAMES = ("paper.md", "paper.tex")

_STATEMENT_OF_NEED = re.compile(
    r"#\s*Statement of need|\\section\*?\{\s*Statement of need\s*\}",
    re.IGNORECASE,
)

_SKIP_DIRS = {".git", "node_modules", ".venv", "venv", ".tox", "__pycache__"}


def find_paper_file(root: Path) -> Optional[Path]:
    """Shallowest ``paper.md``/``paper.tex`` under ``root``, ties by path."""
    candidates = [
        path.relative_to(root)
        for name in PAPER_FILENAMES
        for path in root.rglob(name)
        if path.is_file()
    ]
    candidates = [p for p in candidates if not any(part in _SKIP_DIRS for part in p.parts)]
    if not candidates:
        return None
    return root / min(candidates, key=lambda p: (len(p.parts), p.as_posix()))


def build_paper_report(root: Path) -> PaperReport:
    """Word count and statement-of-need check for the submitted paper."""
    paper = find_paper_file(root)
    if paper is None:
        return PaperReport()

    text = paper.read_text(errors="replace")
    return PaperReport(
        found=True,
        path=paper.relative_to(root).as_posix(),
        word_count=len(text.split()),
        has_statement_of_need=bool(_STATEMENT_OF_NEED.search(text)),
    )

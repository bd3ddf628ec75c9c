"""Language composition — bytes of source per language, by file extension."""

from collections import defaultdict
from pathlib import Path

from submission_checks.models import LanguageReport, LanguageShare

EXTENSION_LANGUAGES: dict[str, str] = {
    ".py": "Python", ".pyx": "Cython", ".ipynb": "Jupyter Notebook",
    ".r": "R", ".jl": "Julia", ".m": "MATLAB",
    ".js": "JavaScript", ".mjs": "JavaScript", ".ts": "TypeScript",
    ".jsx": "JavaScript", ".tsx": "TypeScript", ".go": "Go",
    ".rs": "Rust", ".java": "Java", ".kt": "Kotlin", ".scala": "Scala",
    ".cs": "C#", ".rb": "Ruby", ".php": "PHP",
    ".swift": "Swift", ".c": "C", ".h": "C",
    ".cpp": "C++", ".cc": "C++", ".cxx": "C++", ".hpp": "C++",
    ".f": "Fortran", ".f90": "Fortran", ".f95": "Fortran",
    ".hs": "Haskell", ".ml": "OCaml", ".lua": "Lua", ".pl": "Perl",
    ".sh": "Shell", ".bash": "Shell", ".ps1": "PowerShell",
    ".html": "HTML", ".css": "CSS", ".scss": "SCSS",
    ".tex": "TeX", ".sql": "SQL", ".tf": "HCL",
    ".cu": "Cuda", ".dart": "Dart", ".ex": "Elixir", ".erl": "Erlang",
    ".clj": "Clojure", ".vue": "Vue", ".proto": "Protocol Buffer",
}

FILENAME_LANGUAGES: dict[str, str] = {
    "dockerfile": "Dockerfile",
    "makefile": "Makefile",
    "cmakelists.txt": "CMake",
}

SKIP_DIRS = {
    ".git", "__pycache__", "node_modules", ".venv", "venv", ".tox",
    ".mypy_cache", "vendor", "third_party", "dist", "build",
}


def _language_for(path: Path) -> str:
    by_name = FILENAME_LANGUAGES.get(path.name.lower())
    if by_name:
        return by_name
    return EXTENSION_LANGUAGES.get(path.suffix.lower(), "")


def build_language_report(root: Path) -> LanguageReport:
    """Sum file sizes per language under ``root``, largest first."""
    sizes: dict[str, int] = defaultdict(int)
    for p in root.rglob("*"):
        rel_parts = p.relative_to(root).parts
        if any(part in SKIP_DIRS or part.startswith(".") for part in rel_parts):
            continue
        if not p.is_file():
            continue
        lang = _language_for(p)
        if lang:
            sizes[lang] += p.stat().st_size

    total = sum(sizes.values())
    if total == 0:
        return LanguageReport()

    ordered = sorted(sizes.items(), key=lambda x: (-x[1], x[0]))
    return LanguageReport(
        languages=[
            LanguageShare(name=name, bytes=size, percentage=round(size / total * 100, 1))
            for name, size in ordered
        ]
    )

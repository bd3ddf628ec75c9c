"""License info — identify the license and check OSI approval.

GitHub repositories are identified through the GitHub license API; local
checkouts and other forges fall back to matching the license file text
against known signatures.
"""

import re
from pathlib import Path
from typing import NamedTuple, Optional

from submission_checks.models import LicenseReport

LICENSE_FILE_PREFIXES = ("license", "licence", "copying", "unlicense")

# Canonical license file names, checked before notices like LICENSE-THIRD-PARTY
PREFERRED_LICENSE_FILES = (
    "license", "license.md", "license.txt", "license.rst",
    "licence", "licence.md", "licence.txt", "licence.rst",
    "copying", "copying.md", "copying.txt",
    "unlicense", "unlicense.md", "unlicense.txt",
)

# Reported for a license file that exists but matches no known license
OTHER_LICENSE_NAME = "Other"
NOASSERTION = "NOASSERTION"

# SPDX ids with a known OSI status; anything else is reported as unknown
OSI_APPROVED: set[str] = {
    "0BSD", "AFL-3.0", "AGPL-3.0", "Apache-2.0", "Artistic-2.0",
    "BSD-2-Clause", "BSD-3-Clause", "BSL-1.0", "ECL-2.0", "EPL-1.0",
    "EPL-2.0", "EUPL-1.1", "EUPL-1.2", "GPL-2.0", "GPL-3.0", "ISC",
    "LGPL-2.1", "LGPL-3.0", "LPPL-1.3c", "MIT", "MIT-0", "MPL-2.0",
    "MS-PL", "MS-RL", "MulanPSL-2.0", "NCSA", "OFL-1.1", "OSL-3.0",
    "PostgreSQL", "UPL-1.0", "Unlicense", "Zlib",
}
NOT_OSI_APPROVED: set[str] = {
    "BSD-3-Clause-Clear", "BSD-4-Clause", "CC-BY-4.0", "CC-BY-NC-4.0",
    "CC-BY-SA-4.0", "CC0-1.0", "ODbL-1.0", "Vim", "WTFPL",
}


class LicenseSignature(NamedTuple):
    spdx_id: str
    name: str
    patterns: tuple[str, ...]  # all must match


# More specific signatures first: LGPL/AGPL texts mention the GPL too.
SIGNATURES: list[LicenseSignature] = [
    LicenseSignature("AGPL-3.0", "GNU Affero General Public License v3.0",
                     (r"GNU AFFERO GENERAL PUBLIC LICENSE", r"Version 3")),
    LicenseSignature("LGPL-3.0", "GNU Lesser General Public License v3.0",
                     (r"GNU LESSER GENERAL PUBLIC LICENSE", r"Version 3")),
    LicenseSignature("LGPL-2.1", "GNU Lesser General Public License v2.1",
                     (r"GNU LESSER GENERAL PUBLIC LICENSE", r"Version 2\.1")),
    LicenseSignature("GPL-3.0", "GNU General Public License v3.0",
                     (r"GNU GENERAL PUBLIC LICENSE", r"Version 3")),
    LicenseSignature("GPL-2.0", "GNU General Public License v2.0",
                     (r"GNU GENERAL PUBLIC LICENSE", r"Version 2")),
    LicenseSignature("Apache-2.0", "Apache License 2.0",
                     (r"Apache License", r"Version 2\.0")),
    LicenseSignature("MPL-2.0", "Mozilla Public License 2.0",
                     (r"Mozilla Public License,? (?:Version|v\.?) ?2\.0",)),
    LicenseSignature("EPL-2.0", "Eclipse Public License 2.0",
                     (r"Eclipse Public License - v 2\.0",)),
    LicenseSignature("BSL-1.0", "Boost Software License 1.0",
                     (r"Boost Software License - Version 1\.0",)),
    LicenseSignature("BSD-3-Clause", 'BSD 3-Clause "New" or "Revised" License',
                     (r"Redistribution and use in source and binary forms",
                      r"(?:Neither the name|names of its\s+contributors)")),
    LicenseSignature("BSD-2-Clause", 'BSD 2-Clause "Simplified" License',
                     (r"Redistribution and use in source and binary forms",)),
    LicenseSignature("MIT", "MIT License",
                     (r"Permission is hereby granted, free of charge",)),
    LicenseSignature("ISC", "ISC License",
                     (r"Permission to use, copy, modify, and(?:/or)? distribute this software",)),
    LicenseSignature("Zlib", "zlib License",
                     (r"This software is provided 'as-is'",
                      r"altered source versions must be plainly marked")),
    LicenseSignature("Unlicense", "The Unlicense",
                     (r"This is free and unencumbered software released into the public domain",)),
    LicenseSignature("CC-BY-NC-4.0", "Creative Commons Attribution Non Commercial 4.0",
                     (r"Attribution-NonCommercial 4\.0",)),
    LicenseSignature("CC-BY-4.0", "Creative Commons Attribution 4.0",
                     (r"Attribution 4\.0 International",)),
    LicenseSignature("CC0-1.0", "Creative Commons Zero v1.0 Universal",
                     (r"CC0 1\.0 Universal",)),
]


def osi_status(spdx_id: str) -> Optional[bool]:
    """True/False when the OSI status of ``spdx_id`` is known, else None."""
    if spdx_id in OSI_APPROVED:
        return True
    if spdx_id in NOT_OSI_APPROVED:
        return False
    return None


def _file_rank(path: Path) -> tuple[int, int, str]:
    name = path.name.lower()
    if name in PREFERRED_LICENSE_FILES:
        return (0, PREFERRED_LICENSE_FILES.index(name), name)
    return (1, 0, name)


def find_license_files(root: Path) -> list[Path]:
    """License-like files at the repository root, canonical names first."""
    return sorted(
        (
            p for p in root.iterdir()
            if p.is_file() and p.name.lower().startswith(LICENSE_FILE_PREFIXES)
        ),
        key=_file_rank,
    )


def find_license_file(root: Path) -> Optional[Path]:
    """The most canonical license file at the repository root, if any."""
    candidates = find_license_files(root)
    return candidates[0] if candidates else None


def identify_license(text: str) -> Optional[LicenseSignature]:
    """Match license text against the known signatures."""
    normalized = " ".join(text.split())
    for sig in SIGNATURES:
        if all(re.search(p, normalized, re.IGNORECASE) for p in sig.patterns):
            return sig
    return None


def build_license_report(root: Path) -> LicenseReport:
    """Detect the license of a local checkout and its OSI status.

    Candidate files are tried in rank order until one is recognized. A
    license file that matches nothing is reported as ``Other``.
    """
    candidates = find_license_files(root)
    if not candidates:
        return LicenseReport()

    for path in candidates:
        sig = identify_license(path.read_text(errors="replace"))
        if sig is not None:
            return LicenseReport(
                found=True,
                path=path.name,
                name=sig.name,
                spdx_id=sig.spdx_id,
                osi_approved=osi_status(sig.spdx_id),
            )
    return LicenseReport(
        found=True,
        path=candidates[0].name,
        name=OTHER_LICENSE_NAME,
        spdx_id=NOASSERTION,
    )


def license_report_from_github(payload: Optional[dict]) -> LicenseReport:
    """Build the report from a ``GET /repos/{owner}/{repo}/license`` payload.

    ``None`` means GitHub found no license file.
    """
    if not payload:
        return LicenseReport()
    info = payload.get("license") or {}
    spdx_id = info.get("spdx_id") or NOASSERTION
    return LicenseReport(
        found=True,
        path=payload.get("path"),
        name=info.get("name") or OTHER_LICENSE_NAME,
        spdx_id=spdx_id,
        osi_approved=osi_status(spdx_id),
    )

"""Submission Checks — automated repository checks for peer-review submissions.

Inspects a submitted repository and posts diagnostic comments: paper file
info, license validity, language composition, commit-history anomalies and
engagement metrics.
"""

__version__ = "0.1.0"

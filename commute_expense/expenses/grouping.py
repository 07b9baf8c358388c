"""
Submission Grouping

Partitions submissions by creation year and month for the history views.
"""

from datetime import timezone, tzinfo
from typing import Iterable

from .models import Submission

GroupedSubmissions = dict[str, dict[str, list[Submission]]]


def group_submissions_by_year_and_month(
    submissions: Iterable[Submission],
    tz: tzinfo | None = None,
) -> GroupedSubmissions:
    """Group submissions into year -> month -> submissions.

    Each bucket keeps the relative order of the input. Keys are the
    four-digit year and the zero-padded month ("01".."12").

    Args:
        submissions: Submissions in any order
        tz: Zone to read the calendar date in; timestamps are used as-is
            when omitted (naive timestamps count as UTC)

    Returns:
        Nested mapping of submissions
    """
    grouped: GroupedSubmissions = {}

    for submission in submissions:
        created_at = submission.created_at
        if tz is not None:
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            created_at = created_at.astimezone(tz)

        year = f"{created_at.year:04d}"
        month = f"{created_at.month:02d}"

        grouped.setdefault(year, {}).setdefault(month, []).append(submission)

    return grouped


def sorted_groups(grouped: GroupedSubmissions) -> list[tuple[str, list[tuple[str, list[Submission]]]]]:
    """Order a grouping for display: newest year first, newest month first."""
    return [
        (year, sorted(months.items(), key=lambda item: int(item[0]), reverse=True))
        for year, months in sorted(grouped.items(), key=lambda item: int(item[0]), reverse=True)
    ]

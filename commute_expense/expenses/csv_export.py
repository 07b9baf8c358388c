"""
CSV Export

Renders approved submissions as the accounting CSV: one row per fare,
every field quoted, CRLF line endings, UTF-8 with a byte-order mark.
"""

import csv
from dataclasses import dataclass
from datetime import tzinfo
from io import StringIO
from typing import Iterable

from .formatting import format_timestamp, kind_label, status_label
from .models import ExpenseKind, Submission

DEFAULT_FILENAME = "approved_expenses.csv"

CSV_COLUMNS = [
    "申請NO",
    "申請ID",
    "申請者",
    "申請日",
    "ステータス",
    "タイプ",
    "利用日",
    "定期期間",
    "交通機関",
    "出発駅",
    "帰着駅",
    "金額",
    "備考欄",
    "承認日",
    "却下日",
]

UTF8_BOM = b"\xef\xbb\xbf"


@dataclass
class CsvExport:
    """A rendered CSV file ready for download."""

    filename: str
    content: bytes
    submission_count: int
    row_count: int


def generate_csv_data(submissions: Iterable[Submission], tz: tzinfo | None = None) -> str:
    """Render submissions as CSV text.

    The sequence number counts submissions, so every fare of the same
    submission shares it.

    Args:
        submissions: Submissions in export order
        tz: Display zone for timestamps

    Returns:
        CSV text without BOM
    """
    output = StringIO()
    output.write(",".join(CSV_COLUMNS) + "\r\n")

    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\r\n")

    for sequence, submission in enumerate(submissions, 1):
        for line in submission.lines:
            is_pass = line.kind == ExpenseKind.REGULAR
            writer.writerow([
                sequence,
                submission.id,
                submission.applicant_label,
                format_timestamp(submission.created_at, tz),
                status_label(submission.status.value),
                kind_label(line.kind.value),
                "" if is_pass else line.travel_date,
                line.date_label if is_pass else "",
                line.transportation,
                line.from_station,
                line.to_station,
                line.amount,
                line.notes,
                format_timestamp(submission.approved_at, tz),
                format_timestamp(submission.rejected_at, tz),
            ])

    return output.getvalue()


def build_csv_export(
    submissions: list[Submission],
    tz: tzinfo | None = None,
    filename: str = DEFAULT_FILENAME,
) -> CsvExport:
    """Render submissions into a downloadable file with BOM."""
    content = generate_csv_data(submissions, tz)

    return CsvExport(
        filename=filename,
        content=UTF8_BOM + content.encode("utf-8"),
        submission_count=len(submissions),
        row_count=sum(len(s.lines) for s in submissions),
    )

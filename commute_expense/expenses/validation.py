"""
Submission Validation

Line predicates and the checks a draft must pass before it is persisted.

Two predicates are deliberately kept apart:

- ``is_blank``: from, to and amount are all empty. The row editor uses it to
  find placeholder rows to fill.
- ``has_content``: anything at all was typed, including only a date or only
  a carrier. The submission workflow uses it to decide which rows to send.

A row holding only a carrier is therefore blank for the editor but still
submitted, where it then fails validation.
"""

from .exceptions import ValidationFailure
from .formatting import amount_value
from .models import ExpenseKind, ExpenseLine, Fare, PassFare, TripFare

NOTHING_TO_SUBMIT = "申請する項目がありません。"
MISSING_FROM = "出発駅を入力してください。"
MISSING_TO = "帰着駅を入力してください。"
INVALID_AMOUNT = "金額を正しく入力してください。"
MISSING_TRAVEL_DATE = "単発または出張の場合、利用日を入力してください。"
MISSING_PERIOD = "定期の場合、開始日と終了日を入力してください。"
MISSING_TRANSPORTATION = "交通機関を入力してください。"


def is_blank(line: ExpenseLine) -> bool:
    """Check whether a draft row is an unused placeholder."""
    return not line.from_station and not line.to_station and not line.amount


def has_content(line: ExpenseLine) -> bool:
    """Check whether anything was entered on a draft row."""
    if line.from_station.strip() or line.to_station.strip() or line.amount.strip():
        return True

    if line.kind == ExpenseKind.REGULAR:
        if line.start_date.strip() or line.end_date.strip():
            return True
    elif line.start_date.strip():
        return True

    return bool(line.transportation.strip())


def submittable_rows(lines: list[ExpenseLine]) -> list[tuple[int, ExpenseLine]]:
    """Rows with content, paired with their position in the draft."""
    return [(index, line) for index, line in enumerate(lines) if has_content(line)]


def filter_submittable(lines: list[ExpenseLine]) -> list[ExpenseLine]:
    """Drop rows with no content, preserving order."""
    return [line for _, line in submittable_rows(lines)]


def validate_line(line: ExpenseLine, index: int = 0) -> Fare:
    """Validate one row and convert it into a typed fare.

    Checks run in a fixed order and the first failure wins.

    Args:
        line: Draft row
        index: Position of the row in the draft, reported on failure

    Returns:
        TripFare or PassFare

    Raises:
        ValidationFailure: If a required field is missing or malformed
    """
    if not line.from_station.strip():
        raise ValidationFailure(MISSING_FROM, field="from_station", line_index=index)

    if not line.to_station.strip():
        raise ValidationFailure(MISSING_TO, field="to_station", line_index=index)

    amount = amount_value(line.amount) if line.amount.strip() else None
    if amount is None:
        raise ValidationFailure(INVALID_AMOUNT, field="amount", line_index=index)

    if line.kind == ExpenseKind.REGULAR:
        if not line.start_date.strip() or not line.end_date.strip():
            raise ValidationFailure(MISSING_PERIOD, field="start_date", line_index=index)
    elif not line.start_date.strip():
        raise ValidationFailure(MISSING_TRAVEL_DATE, field="start_date", line_index=index)

    if not line.transportation.strip():
        raise ValidationFailure(MISSING_TRANSPORTATION, field="transportation", line_index=index)

    if line.kind == ExpenseKind.REGULAR:
        return PassFare(
            from_station=line.from_station.strip(),
            to_station=line.to_station.strip(),
            amount=amount,
            period_start=line.start_date.strip(),
            period_end=line.end_date.strip(),
            transportation=line.transportation.strip(),
            notes=line.notes.strip(),
        )

    return TripFare(
        kind=line.kind,
        from_station=line.from_station.strip(),
        to_station=line.to_station.strip(),
        amount=amount,
        travel_date=line.start_date.strip(),
        transportation=line.transportation.strip(),
        notes=line.notes.strip(),
    )


def validate_draft(lines: list[ExpenseLine]) -> list[Fare]:
    """Filter a draft and validate every remaining row.

    Args:
        lines: Draft rows in display order

    Returns:
        Typed fares in the same order

    Raises:
        ValidationFailure: If nothing is left to submit or a row is invalid
    """
    submittable = submittable_rows(lines)
    if not submittable:
        raise ValidationFailure(NOTHING_TO_SUBMIT)

    return [validate_line(line, index) for index, line in submittable]

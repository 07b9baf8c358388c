"""
Expense Row Editor

In-memory draft of expense rows behind the submission form.
"""

import logging
from typing import Iterable

from .exceptions import ValidationFailure
from .formatting import amount_value, parse_amount
from .models import ExpenseKind, ExpenseLine, Fare
from .validation import is_blank

logger = logging.getLogger(__name__)

ROUND_TRIP_NEEDS_STATIONS = "往復にするには、出発駅と到着駅を入力してください。"
EMPTY_TEMPLATE = "適用できるテンプレートデータがありません。"
LAST_ROW = "少なくとも1行は必要です。"

EDITABLE_FIELDS = (
    "kind",
    "from_station",
    "to_station",
    "amount",
    "start_date",
    "end_date",
    "transportation",
    "notes",
)


class ExpenseRowEditor:
    """Ordered list of draft rows. Always holds at least one row."""

    def __init__(self, lines: Iterable[ExpenseLine] | None = None):
        """Initialize the editor.

        Args:
            lines: Starting rows; a single blank row when empty or omitted
        """
        self._lines: list[ExpenseLine] = [line.copy() for line in lines or []]
        if not self._lines:
            self._lines = [ExpenseLine.blank()]

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[ExpenseLine]:
        """Snapshot of the current rows."""
        return [line.copy() for line in self._lines]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._lines):
            raise ValidationFailure(f"Row {index} does not exist", line_index=index)

    def add_row(self) -> ExpenseLine:
        """Append a blank row departing from where the last row arrived.

        Returns:
            The appended row
        """
        previous = self._lines[-1]
        line = ExpenseLine.blank(from_station=previous.to_station)
        self._lines.append(line)
        return line.copy()

    def remove_row(self, index: int) -> None:
        """Remove a row.

        Raises:
            ValidationFailure: If the row is the only one left
        """
        self._check_index(index)
        if len(self._lines) <= 1:
            raise ValidationFailure(LAST_ROW, line_index=index)
        del self._lines[index]

    def clear_row(self, index: int) -> None:
        """Reset a row to a blank one-time row in place."""
        self._check_index(index)
        self._lines[index] = ExpenseLine.blank()

    def update_row(self, index: int, **changes) -> ExpenseLine:
        """Set individual fields of a row.

        Amounts are stored without thousands separators.

        Args:
            index: Row position
            **changes: Field values keyed by field name

        Returns:
            The updated row
        """
        self._check_index(index)

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unknown fields: {', '.join(sorted(unknown))}", line_index=index)

        if "kind" in changes and not isinstance(changes["kind"], ExpenseKind):
            changes["kind"] = ExpenseKind(changes["kind"])
        if "amount" in changes:
            changes["amount"] = parse_amount(changes["amount"] or "")

        self._lines[index] = self._lines[index].copy(**changes)
        return self._lines[index].copy()

    def make_round_trip(self, index: int) -> ExpenseLine:
        """Insert the return leg right after a row.

        Args:
            index: Row to mirror

        Returns:
            The inserted return row

        Raises:
            ValidationFailure: If the row lacks a departure or arrival station
        """
        self._check_index(index)
        original = self._lines[index]

        if not original.from_station or not original.to_station:
            raise ValidationFailure(ROUND_TRIP_NEEDS_STATIONS, line_index=index)

        return_leg = original.copy(
            from_station=original.to_station,
            to_station=original.from_station,
        )
        self._lines.insert(index + 1, return_leg)
        return return_leg.copy()

    def apply_template(self, template: Iterable[Fare | ExpenseLine]) -> int:
        """Copy a past submission's rows into the draft, without dates.

        Each template row fills the first blank row, or is appended once no
        blank rows are left.

        Args:
            template: Rows of a previous submission

        Returns:
            Number of rows applied

        Raises:
            ValidationFailure: If the template has no rows
        """
        template_lines = [
            item if isinstance(item, ExpenseLine) else item.to_draft()
            for item in template
        ]
        if not template_lines:
            raise ValidationFailure(EMPTY_TEMPLATE)

        applied = 0
        for item in template_lines:
            line = item.copy(start_date="", end_date="")

            for i, current in enumerate(self._lines):
                if is_blank(current):
                    self._lines[i] = line
                    break
            else:
                self._lines.append(line)

            applied += 1

        logger.debug(f"Applied {applied} template rows")
        return applied

    def reset(self) -> None:
        """Go back to a single blank row."""
        self._lines = [ExpenseLine.blank()]

    def total_amount(self) -> int:
        """Running total of the draft; unparseable amounts count as zero."""
        return sum(amount_value(line.amount) or 0 for line in self._lines)

"""
Submission Validation Tests

Tests the blank/content predicates and per-row validation.
"""

import pytest

from commute_expense.expenses.exceptions import ValidationFailure
from commute_expense.expenses.models import ExpenseKind, ExpenseLine, PassFare, TripFare
from commute_expense.expenses.validation import (
    INVALID_AMOUNT,
    MISSING_FROM,
    MISSING_PERIOD,
    MISSING_TO,
    MISSING_TRANSPORTATION,
    MISSING_TRAVEL_DATE,
    NOTHING_TO_SUBMIT,
    filter_submittable,
    has_content,
    is_blank,
    submittable_rows,
    validate_draft,
    validate_line,
)


class TestPredicates:
    """Tests for is_blank and has_content."""

    def test_empty_row(self):
        line = ExpenseLine()
        assert is_blank(line)
        assert not has_content(line)

    def test_carrier_only(self):
        """Test a carrier-only row is blank but still has content."""
        line = ExpenseLine(transportation="JR")
        assert is_blank(line)
        assert has_content(line)

    def test_date_only(self):
        line = ExpenseLine(start_date="2024-04-01")
        assert is_blank(line)
        assert has_content(line)

    def test_end_date_counts_for_passes_only(self):
        """Test the end date is ignored on one-time rows."""
        assert not has_content(ExpenseLine(end_date="2024-04-30"))
        assert has_content(ExpenseLine(kind=ExpenseKind.REGULAR, end_date="2024-04-30"))

    def test_whitespace_only(self):
        """Test whitespace is content for is_blank but not for has_content."""
        line = ExpenseLine(from_station="  ")
        assert not is_blank(line)
        assert not has_content(line)

    def test_filter_keeps_order(self, one_time_line, regular_line):
        lines = [ExpenseLine(), regular_line, ExpenseLine(), one_time_line]
        assert filter_submittable(lines) == [regular_line, one_time_line]

    def test_filter_is_idempotent(self, one_time_line, regular_line):
        """Test filtering an already filtered draft changes nothing."""
        lines = [
            ExpenseLine(),
            ExpenseLine(transportation="JR"),
            ExpenseLine(from_station="  ", notes="  "),
            one_time_line,
            ExpenseLine(),
            regular_line,
        ]

        once = filter_submittable(lines)

        assert filter_submittable(once) == once
        assert once == [ExpenseLine(transportation="JR"), one_time_line, regular_line]

    def test_submittable_rows_keep_draft_positions(self, one_time_line):
        lines = [ExpenseLine(), one_time_line, ExpenseLine(), ExpenseLine(transportation="JR")]

        assert [index for index, _ in submittable_rows(lines)] == [1, 3]


class TestValidateLine:
    """Tests for row validation order and conversion."""

    def test_one_time_fare(self, one_time_line):
        fare = validate_line(one_time_line)

        assert isinstance(fare, TripFare)
        assert fare.kind == ExpenseKind.ONE_TIME
        assert fare.amount == 330
        assert fare.travel_date == "2024-04-10"

    def test_pass_fare(self, regular_line):
        fare = validate_line(regular_line)

        assert isinstance(fare, PassFare)
        assert fare.amount == 1000
        assert fare.period_start == "2024-04-01"
        assert fare.period_end == "2024-04-30"
        assert fare.to_dict()["amount"] == "1000"

    def test_values_trimmed(self, one_time_line):
        fare = validate_line(one_time_line.copy(from_station=" 梅田 ", notes=" 会議 "))
        assert fare.from_station == "梅田"
        assert fare.notes == "会議"

    @pytest.mark.parametrize("changes, message, field", [
        ({"from_station": ""}, MISSING_FROM, "from_station"),
        ({"to_station": " "}, MISSING_TO, "to_station"),
        ({"amount": ""}, INVALID_AMOUNT, "amount"),
        ({"amount": "12a"}, INVALID_AMOUNT, "amount"),
        ({"start_date": ""}, MISSING_TRAVEL_DATE, "start_date"),
        ({"transportation": ""}, MISSING_TRANSPORTATION, "transportation"),
    ])
    def test_missing_fields(self, one_time_line, changes, message, field):
        with pytest.raises(ValidationFailure) as exc_info:
            validate_line(one_time_line.copy(**changes), index=2)

        assert exc_info.value.message == message
        assert exc_info.value.field == field
        assert exc_info.value.line_index == 2

    def test_pass_needs_both_dates(self, regular_line):
        with pytest.raises(ValidationFailure) as exc_info:
            validate_line(regular_line.copy(end_date=""))
        assert exc_info.value.message == MISSING_PERIOD

    def test_first_failure_wins(self):
        """Test the departure station is reported before anything else."""
        with pytest.raises(ValidationFailure) as exc_info:
            validate_line(ExpenseLine(transportation="JR"))
        assert exc_info.value.message == MISSING_FROM


class TestValidateDraft:
    """Tests for validating a whole draft."""

    def test_nothing_to_submit(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate_draft([ExpenseLine(), ExpenseLine()])
        assert exc_info.value.message == NOTHING_TO_SUBMIT

    def test_skips_empty_rows(self, one_time_line, regular_line):
        fares = validate_draft([ExpenseLine(), one_time_line, ExpenseLine(), regular_line])
        assert [fare.kind for fare in fares] == [ExpenseKind.ONE_TIME, ExpenseKind.REGULAR]

    def test_reports_draft_position(self, one_time_line):
        """Test the failing row is reported by its position in the draft."""
        broken = one_time_line.copy(amount="")
        with pytest.raises(ValidationFailure) as exc_info:
            validate_draft([ExpenseLine(), one_time_line, broken])
        assert exc_info.value.line_index == 2

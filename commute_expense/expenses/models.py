"""
Expense Data Models

Draft rows, validated fares, and persisted submissions.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Union

from .formatting import amount_value


class ExpenseKind(Enum):
    """Kind of trip record."""
    ONE_TIME = "one_time"
    BUSINESS_TRIP = "business_trip"
    REGULAR = "regular"


class SubmissionStatus(Enum):
    """Approval workflow status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class ExpenseLine:
    """One editable row of a draft.

    Every field is kept as text so half-filled rows can live in the draft.
    ``start_date`` is the travel date for one-time and business-trip fares
    and the period start for commuter passes; ``end_date`` is only used by
    passes.
    """

    kind: ExpenseKind = ExpenseKind.ONE_TIME
    from_station: str = ""
    to_station: str = ""
    amount: str = ""
    start_date: str = ""
    end_date: str = ""
    transportation: str = ""
    notes: str = ""

    @classmethod
    def blank(cls, from_station: str = "") -> "ExpenseLine":
        """Create an empty one-time row, optionally seeded with a departure."""
        return cls(from_station=from_station)

    def copy(self, **changes: Any) -> "ExpenseLine":
        return replace(self, **changes)


@dataclass(frozen=True)
class TripFare:
    """A validated one-time or business-trip fare."""

    kind: ExpenseKind
    from_station: str
    to_station: str
    amount: int
    travel_date: str
    transportation: str
    notes: str = ""

    @property
    def date_label(self) -> str:
        return self.travel_date

    def to_draft(self) -> ExpenseLine:
        return ExpenseLine(
            kind=self.kind,
            from_station=self.from_station,
            to_station=self.to_station,
            amount=str(self.amount),
            start_date=self.travel_date,
            transportation=self.transportation,
            notes=self.notes,
        )

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "from_station": self.from_station,
            "to_station": self.to_station,
            "amount": str(self.amount),
            "start_date": self.travel_date,
            "end_date": "",
            "transportation": self.transportation,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class PassFare:
    """A validated commuter pass covering a period."""

    from_station: str
    to_station: str
    amount: int
    period_start: str
    period_end: str
    transportation: str
    notes: str = ""
    kind: ExpenseKind = field(default=ExpenseKind.REGULAR, init=False)

    @property
    def date_label(self) -> str:
        return f"{self.period_start} ~ {self.period_end}"

    def to_draft(self) -> ExpenseLine:
        return ExpenseLine(
            kind=self.kind,
            from_station=self.from_station,
            to_station=self.to_station,
            amount=str(self.amount),
            start_date=self.period_start,
            end_date=self.period_end,
            transportation=self.transportation,
            notes=self.notes,
        )

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "from_station": self.from_station,
            "to_station": self.to_station,
            "amount": str(self.amount),
            "start_date": self.period_start,
            "end_date": self.period_end,
            "transportation": self.transportation,
            "notes": self.notes,
        }


Fare = Union[TripFare, PassFare]


def fare_from_dict(data: dict) -> Fare:
    """Rebuild a fare from its stored JSON shape.

    Stored rows predate strict validation in places, so an unparseable
    amount reads back as 0 instead of failing the whole listing.
    """
    kind = ExpenseKind(data.get("type") or ExpenseKind.ONE_TIME.value)
    amount = amount_value(str(data.get("amount") or "")) or 0

    if kind == ExpenseKind.REGULAR:
        return PassFare(
            from_station=data.get("from_station") or "",
            to_station=data.get("to_station") or "",
            amount=amount,
            period_start=data.get("start_date") or "",
            period_end=data.get("end_date") or "",
            transportation=data.get("transportation") or "",
            notes=data.get("notes") or "",
        )

    return TripFare(
        kind=kind,
        from_station=data.get("from_station") or "",
        to_station=data.get("to_station") or "",
        amount=amount,
        travel_date=data.get("start_date") or "",
        transportation=data.get("transportation") or "",
        notes=data.get("notes") or "",
    )


@dataclass
class Submission:
    """A persisted batch of fares with its approval state."""

    id: str
    owner_id: str
    created_at: datetime
    lines: list[Fare]
    status: SubmissionStatus = SubmissionStatus.PENDING
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    applicant_name: str | None = None
    applicant_email: str | None = None

    @property
    def total_amount(self) -> int:
        return sum(line.amount for line in self.lines)

    @property
    def applicant_label(self) -> str:
        return self.applicant_name or self.applicant_email or "不明"


@dataclass
class SubmissionNotice:
    """What the team channel is told about a new submission."""

    user_name: str
    date: str
    total_amount: int
    items_count: int
    items: list[dict] = field(default_factory=list)

    @classmethod
    def from_fares(cls, user_name: str, date: str, fares: list[Fare]) -> "SubmissionNotice":
        return cls(
            user_name=user_name,
            date=date,
            total_amount=sum(fare.amount for fare in fares),
            items_count=len(fares),
            items=[fare.to_dict() for fare in fares],
        )

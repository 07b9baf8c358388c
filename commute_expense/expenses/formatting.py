"""
Formatting Helpers

Amount formatting/parsing and the Japanese display labels shared by the
CSV export and the webhook message.
"""

import re
from datetime import date, datetime, timezone, tzinfo

# Display labels keyed by stored enum value
KIND_LABELS = {
    "one_time": "単発",
    "business_trip": "出張",
    "regular": "定期",
}

STATUS_LABELS = {
    "pending": "申請中",
    "approved": "承認",
    "rejected": "却下",
}

UNSET_LABEL = "未設定"

_AMOUNT_PATTERN = re.compile(r"^\d+$")


def parse_amount(value: str) -> str:
    """Strip thousands separators from an amount string.

    Args:
        value: Amount as typed, e.g. ``"1,000"``

    Returns:
        Amount without commas, e.g. ``"1000"``
    """
    return value.replace(",", "")


def amount_value(value: str) -> int | None:
    """Parse an amount string into a non-negative integer.

    Args:
        value: Amount with optional comma separators

    Returns:
        Integer amount, or None if the text is empty or not a whole number
    """
    cleaned = parse_amount(value).strip()
    if not _AMOUNT_PATTERN.match(cleaned):
        return None
    return int(cleaned)


def format_amount(value: str) -> str:
    """Render an amount string with comma separators.

    Unparseable input renders as an empty string.
    """
    if not value:
        return ""

    parsed = amount_value(value)
    if parsed is None:
        return ""

    return f"{parsed:,}"


def kind_label(kind: str) -> str:
    return KIND_LABELS.get(kind, KIND_LABELS["one_time"])


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def format_timestamp(value: datetime | None, tz: tzinfo | None = None) -> str:
    """Render a timestamp as ``YYYY/MM/DD HH:MM:SS`` in the display zone.

    Naive timestamps are treated as UTC.
    """
    if value is None:
        return ""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if tz is not None:
        value = value.astimezone(tz)

    return value.strftime("%Y/%m/%d %H:%M:%S")


def format_short_date(value: date) -> str:
    """Render a date the way the notification shows it, e.g. ``2024/4/1``."""
    return f"{value.year}/{value.month}/{value.day}"

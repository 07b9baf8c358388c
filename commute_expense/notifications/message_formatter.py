"""
Notification Message Formatter

Builds the Slack Block Kit message posted when an expense is submitted.
"""

import logging

from ..expenses.formatting import UNSET_LABEL, kind_label
from ..expenses.models import ExpenseKind, SubmissionNotice

logger = logging.getLogger(__name__)


class NotificationFormatter:
    """Formats submission notices for a Slack incoming webhook."""

    HEADER_TEXT = "💰 新しい交通費申請"
    FALLBACK_TEXT = "💰 新しい交通費申請がありました！"
    BUTTON_TEXT = "📋 申請を確認・承認"
    FOOTER_TEXT = "交通費精算システムからの自動通知"

    def __init__(self, app_url: str = "http://localhost:5173"):
        """Initialize formatter.

        Args:
            app_url: Link target of the review button
        """
        self.app_url = app_url.rstrip("/")

    def format_item(self, index: int, item: dict) -> str:
        """Format one itemized line.

        Args:
            index: 1-based position
            item: Fare in stored shape

        Returns:
            mrkdwn text
        """
        kind = item.get("type") or ExpenseKind.ONE_TIME.value
        start = item.get("start_date") or UNSET_LABEL
        if kind == ExpenseKind.REGULAR.value:
            date_text = f"{start} ~ {item.get('end_date') or UNSET_LABEL}"
        else:
            date_text = start

        text = (
            f"{index}. *{kind_label(kind)}* ({date_text})\n"
            f"   {item.get('from_station', '')} → {item.get('to_station', '')}: *{item.get('amount', '')}円*"
        )
        if item.get("notes"):
            text += f"\n   備考: {item['notes']}"

        return text

    def format_submission(self, notice: SubmissionNotice) -> dict:
        """Build the webhook payload for a submission.

        Args:
            notice: Submission summary

        Returns:
            Slack message payload
        """
        details = "\n\n".join(
            self.format_item(i, item) for i, item in enumerate(notice.items, 1)
        )

        return {
            "text": self.FALLBACK_TEXT,
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": self.HEADER_TEXT},
                },
                {
                    "type": "section",
                    "fields": [
                        {"type": "mrkdwn", "text": f"*申請者:*\n{notice.user_name}"},
                        {"type": "mrkdwn", "text": f"*申請日:*\n{notice.date}"},
                        {"type": "mrkdwn", "text": f"*合計金額:*\n¥{notice.total_amount:,}"},
                        {"type": "mrkdwn", "text": f"*項目数:*\n{notice.items_count}件"},
                    ],
                },
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"*申請内容:*\n{details}"},
                },
                {
                    "type": "actions",
                    "elements": [
                        {
                            "type": "button",
                            "text": {"type": "plain_text", "text": self.BUTTON_TEXT},
                            "url": f"{self.app_url}/",
                            "style": "primary",
                        }
                    ],
                },
                {
                    "type": "context",
                    "elements": [{"type": "mrkdwn", "text": self.FOOTER_TEXT}],
                },
            ],
        }

"""
Notifications Module

Formats and delivers submission notices to the team chat.
"""

from .message_formatter import NotificationFormatter, SubmissionNotice
from .slack_notifier import SlackNotifier

__all__ = [
    "NotificationFormatter",
    "SubmissionNotice",
    "SlackNotifier",
]

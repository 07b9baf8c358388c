"""
Slack Webhook Notifier

Posts submission notices to an incoming webhook. Delivery is attempted once;
failures surface as NotificationFailure for the caller to log.
"""

import logging
import os
from pathlib import Path

import httpx
import yaml

from ..expenses.exceptions import NotificationFailure
from .message_formatter import NotificationFormatter, SubmissionNotice

logger = logging.getLogger(__name__)


class SlackNotifier:
    """Sends submission notices to Slack."""

    def __init__(
        self,
        config_dir: Path | str | None = None,
        webhook_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize notifier.

        Args:
            config_dir: Path to configuration directory
            webhook_url: Webhook URL, overriding config and environment
            transport: httpx transport, for tests
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"
        self._load_config()

        self.webhook_url = (
            webhook_url
            or os.getenv("SLACK_WEBHOOK_URL")
            or self.config.get("webhook_url")
            or ""
        )
        self.timeout = float(os.getenv("NOTIFY_TIMEOUT_SECONDS", self.config.get("timeout_seconds", 10)))
        self.enabled = bool(self.config.get("enabled", True))
        self.transport = transport
        self.formatter = NotificationFormatter(
            app_url=os.getenv("APP_URL") or self.config.get("app_url", "http://localhost:5173"),
        )

    def _load_config(self) -> None:
        """Load configuration from YAML."""
        config_file = self.config_dir / "notification.yaml"
        if config_file.exists():
            with open(config_file) as f:
                self.config = (yaml.safe_load(f) or {}).get("slack", {})
        else:
            self.config = {}

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.webhook_url)

    async def notify_submission(self, notice: SubmissionNotice) -> bool:
        """Post a submission notice.

        Args:
            notice: Submission summary

        Returns:
            True if delivered, False if notifications are not configured

        Raises:
            NotificationFailure: If the webhook call fails
        """
        if not self.is_configured:
            logger.info("Slack webhook not configured, skipping notification")
            return False

        payload = self.formatter.format_submission(notice)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.webhook_url, json=payload)
        except Exception as e:
            # Malformed webhook URLs raise outside httpx.HTTPError
            raise NotificationFailure(f"Slack送信失敗: {e}") from e

        if resp.status_code >= 400:
            raise NotificationFailure(f"Slack送信失敗: {resp.status_code} - {resp.text}")

        logger.info(f"Slack notification sent for {notice.user_name} ({notice.items_count} items)")
        return True

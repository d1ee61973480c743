"""
Telegram Notification Service
Sends messages through the Telegram Bot API (sendMessage) with HTML formatting
"""

from html import escape
from typing import Any, Dict, Optional

from ..errors import NotifierConfigError
from ..settings import NotificationMetadata
from .base_notifier import BaseNotifier


class TelegramNotifier(BaseNotifier):
    """Send notifications to a Telegram chat via a bot"""

    @property
    def channel_name(self) -> str:
        """Return channel name for logging"""
        return "Telegram"

    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build sendMessage payload

        Text layout: bold title, blank line, message, then a blank-line
        separated block of bold-labelled details when any are present.
        Title, message and project name are HTML-escaped unless the webhook
        sets `telegram_escape_html` to false, in which case they are sent as
        Telegram HTML markup.

        Raises:
            NotifierConfigError: If no chat id is configured
        """
        chat_id = self.webhook.telegram_chat_id
        if not chat_id:
            raise NotifierConfigError("Telegram chat ID not configured")

        text = f"<b>{self._text(title)}</b>\n\n{self._text(message)}"

        details = []
        if metadata is not None:
            if metadata.project_name is not None:
                details.append(f"<b>Project:</b> {self._text(metadata.project_name)}")
            if metadata.task_id is not None:
                details.append(f"<b>Task ID:</b> {metadata.task_id}")
            if metadata.exit_code is not None:
                details.append(f"<b>Exit Code:</b> {metadata.exit_code}")

        if details:
            text += "\n\n" + "\n".join(details)

        return {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
        }

    def _text(self, value: str) -> str:
        return escape(value) if self.webhook.telegram_escape_html else value

"""
Slack Notification Service
Formats notifications for Slack Incoming Webhooks with Block Kit
"""

from typing import Any, Dict, List, Optional

from ..settings import NotificationMetadata
from .base_notifier import BaseNotifier


class SlackNotifier(BaseNotifier):
    """Send notifications to Slack via Incoming Webhooks"""

    @property
    def channel_name(self) -> str:
        """Return channel name for logging"""
        return "Slack"

    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build a Block Kit document

        Header block with the title, section block with the message and, when
        the metadata carries a project name, task id or exit code, a trailing
        context block with one element per present field.

        Args:
            title: Notification title (plain text header)
            message: Notification message (mrkdwn)
            metadata: Optional task/execution context

        Returns:
            Slack webhook payload
        """
        blocks: List[Dict[str, Any]] = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": title
                }
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": message
                }
            }
        ]

        context_elements = self._context_elements(metadata)
        if context_elements:
            blocks.append({
                "type": "context",
                "elements": context_elements
            })

        return {"blocks": blocks}

    @staticmethod
    def _context_elements(metadata: Optional[NotificationMetadata]) -> List[Dict[str, str]]:
        if metadata is None:
            return []

        elements = []
        if metadata.project_name is not None:
            elements.append({"type": "mrkdwn", "text": f"*Project:* {metadata.project_name}"})
        if metadata.task_id is not None:
            elements.append({"type": "mrkdwn", "text": f"*Task ID:* {metadata.task_id}"})
        if metadata.exit_code is not None:
            elements.append({"type": "mrkdwn", "text": f"*Exit Code:* {metadata.exit_code}"})
        return elements

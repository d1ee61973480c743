"""
Discord Notification Service
Formats notifications for Discord webhooks with rich embeds
"""

from typing import Any, Dict, List, Optional

from ..settings import NotificationMetadata
from .base_notifier import BaseNotifier


class DiscordNotifier(BaseNotifier):
    """Send notifications to Discord via webhooks"""

    EMBED_COLOR = 0x58B9FF  # Blue

    @property
    def channel_name(self) -> str:
        """Return channel name for logging"""
        return "Discord"

    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build an embeds document with a single embed

        Args:
            title: Embed title
            message: Embed description
            metadata: Optional task/execution context, rendered as inline fields

        Returns:
            Discord webhook payload
        """
        embed: Dict[str, Any] = {
            "title": title,
            "description": message,
            "timestamp": self._timestamp(),
            "color": self.EMBED_COLOR,
        }

        fields = self._fields(metadata)
        if fields:
            embed["fields"] = fields

        return {"embeds": [embed]}

    @staticmethod
    def _fields(metadata: Optional[NotificationMetadata]) -> List[Dict[str, Any]]:
        if metadata is None:
            return []

        candidates = [
            ("Project", metadata.project_name),
            ("Task ID", metadata.task_id),
            ("Project ID", metadata.project_id),
            ("Exit Code", metadata.exit_code),
        ]
        return [
            {"name": name, "value": str(value), "inline": True}
            for name, value in candidates
            if value is not None
        ]

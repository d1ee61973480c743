"""
Generic Webhook Notification Service
Sends a flat JSON document to custom HTTP/HTTPS endpoints
"""

from typing import Any, Dict, Optional

from ..settings import NotificationMetadata
from .base_notifier import BaseNotifier


class WebhookNotifier(BaseNotifier):
    """Send notifications to generic webhooks as a stable-keyed JSON object"""

    @property
    def channel_name(self) -> str:
        """Return channel name for logging"""
        return "Generic"

    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build JSON payload

        Every metadata key is always present (null when unset) so consumers
        can rely on a fixed key set.
        """
        payload = {
            "title": title,
            "message": message,
            "timestamp": self._timestamp(),
        }
        payload.update((metadata or NotificationMetadata()).to_dict())
        return payload

"""
Pushover Notification Service
Sends push notifications via Pushover API
"""

from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from ..errors import NotifierConfigError
from ..settings import NotificationMetadata
from .base_notifier import BaseNotifier


class PushoverNotifier(BaseNotifier):
    """Send notifications via Pushover mobile app"""

    API_URL = "https://api.pushover.net/1/messages.json"

    @property
    def channel_name(self) -> str:
        """Return channel name for logging"""
        return "Pushover"

    @property
    def target_url(self) -> str:
        # Always the Pushover API; the configured URL only carries the app token
        return self.API_URL

    @property
    def user_key(self) -> str:
        """
        Pushover user key from the webhook entry

        Raises:
            NotifierConfigError: If no user key is configured
        """
        if not self.webhook.pushover_user_key:
            raise NotifierConfigError("Pushover user key not configured")
        return self.webhook.pushover_user_key

    @property
    def api_token(self) -> str:
        """
        Pushover application token

        An explicit pushover_api_token wins; otherwise the token is read from
        the `token` query parameter of the webhook URL, e.g.
        https://api.pushover.net/1/messages.json?token=APP_TOKEN

        Raises:
            NotifierConfigError: If neither source provides a token
        """
        if self.webhook.pushover_api_token:
            return self.webhook.pushover_api_token

        query = parse_qs(urlparse(self.webhook.webhook_url).query)
        tokens = [token for token in query.get("token", []) if token]
        if not tokens:
            raise NotifierConfigError("Invalid Pushover webhook URL format: missing 'token' parameter")
        return tokens[0]

    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build Pushover message payload

        Args:
            title: Notification title
            message: Notification message, details appended as "Label: value" lines
            metadata: Optional task/execution context

        Returns:
            Pushover API payload

        Raises:
            NotifierConfigError: If the user key or app token is missing
        """
        user_key = self.user_key
        token = self.api_token

        details = []
        if metadata is not None:
            if metadata.project_name is not None:
                details.append(f"Project: {metadata.project_name}")
            if metadata.task_id is not None:
                details.append(f"Task ID: {metadata.task_id}")
            if metadata.exit_code is not None:
                details.append(f"Exit Code: {metadata.exit_code}")

        full_message = message
        if details:
            full_message = message + "\n\n" + "\n".join(details)

        return {
            "token": token,
            "user": user_key,
            "title": title,
            "message": full_message,
        }

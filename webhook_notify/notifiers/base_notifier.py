"""
Base Notifier Interface for Webhook Notify
All webhook providers must implement this interface
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from ..settings import NotificationMetadata, WebhookConfig

logger = logging.getLogger(__name__)


class BaseNotifier(ABC):
    """
    Abstract base class for all webhook providers

    A notifier wraps one configured webhook. Formatting is kept separate from
    delivery: build_payload() is a pure mapping from (title, message,
    metadata) to the provider's JSON document, while send_notification()
    performs the HTTP POST.
    """

    def __init__(self, webhook: WebhookConfig):
        """
        Initialize notifier for one webhook

        Args:
            webhook: Webhook configuration entry
        """
        self.webhook = webhook

    @abstractmethod
    def build_payload(self, title: str, message: str,
                      metadata: Optional[NotificationMetadata] = None) -> Dict[str, Any]:
        """
        Build the provider-specific JSON payload

        Args:
            title: Notification title
            message: Notification message body
            metadata: Optional task/execution context

        Returns:
            JSON-serializable dictionary

        Raises:
            NotifierConfigError: If a credential required by the provider is missing
        """
        pass

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """
        Return human-readable channel name for logging

        Returns:
            Channel name (e.g., "Slack", "Discord", "Pushover")
        """
        pass

    @property
    def target_url(self) -> str:
        """URL the payload is POSTed to. Override for providers with a fixed API endpoint."""
        return self.webhook.webhook_url

    def send_notification(self, session: requests.Session, title: str, message: str,
                          metadata: Optional[NotificationMetadata] = None,
                          timeout: float = 10) -> None:
        """
        Format and POST the notification

        Args:
            session: Shared HTTP session
            title: Notification title
            message: Notification message body
            metadata: Optional task/execution context
            timeout: Request timeout in seconds

        Raises:
            NotifierConfigError: If the webhook is missing a required credential
            requests.exceptions.RequestException: On transport failure or non-2xx status

        Note:
            Errors are raised, not logged - the dispatcher decides how a
            failure is reported so one webhook never affects another.
        """
        payload = self.build_payload(title, message, metadata)
        response = session.post(self.target_url, json=payload, timeout=timeout)
        response.raise_for_status()
        logger.info(f"{self.channel_name} notification sent: {title}")

    @staticmethod
    def _timestamp() -> str:
        """RFC3339 UTC timestamp captured at formatting time"""
        return datetime.now(timezone.utc).isoformat()

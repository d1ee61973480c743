"""
Webhook Notification Service for Webhook Notify
Fans a notification out to every enabled webhook in the current settings
"""

import asyncio
import logging
from functools import partial
from typing import Dict, List, Optional, Type

import requests

from ..errors import NotifierConfigError
from ..settings import NotificationMetadata, WebhookConfig, WebhookProvider
from .base_notifier import BaseNotifier
from .discord_notifier import DiscordNotifier
from .pushover_notifier import PushoverNotifier
from .slack_notifier import SlackNotifier
from .telegram_notifier import TelegramNotifier
from .webhook_notifier import WebhookNotifier

logger = logging.getLogger(__name__)

# Map providers to notifier classes. Must cover every WebhookProvider member.
NOTIFIER_CLASSES: Dict[WebhookProvider, Type[BaseNotifier]] = {
    WebhookProvider.SLACK: SlackNotifier,
    WebhookProvider.DISCORD: DiscordNotifier,
    WebhookProvider.PUSHOVER: PushoverNotifier,
    WebhookProvider.TELEGRAM: TelegramNotifier,
    WebhookProvider.GENERIC: WebhookNotifier,
}

_unmapped = set(WebhookProvider) - set(NOTIFIER_CLASSES)
if _unmapped:
    raise RuntimeError(f"No notifier registered for providers: {sorted(p.value for p in _unmapped)}")


def create_notifier(webhook: WebhookConfig) -> BaseNotifier:
    """Instantiate the notifier for a webhook's provider"""
    return NOTIFIER_CLASSES[webhook.provider](webhook)


class WebhookNotificationService:
    """
    Dispatcher for webhook notifications

    Reads a settings snapshot on every call and POSTs to each enabled webhook
    in configured order. Each webhook succeeds or fails on its own - one
    channel failing doesn't stop others, and nothing is raised to the caller.
    """

    def __init__(self, settings_provider, session: Optional[requests.Session] = None,
                 timeout: float = 10, metrics=None):
        """
        Initialize webhook notification service

        Args:
            settings_provider: Object with get_notification_settings() returning
                an immutable NotificationSettings snapshot (e.g. ConfigManager)
            session: HTTP session to reuse (created if omitted)
            timeout: Per-request timeout in seconds
            metrics: Optional PrometheusMetrics instance
        """
        self.settings_provider = settings_provider
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.metrics = metrics

    async def send_notification(self, title: str, message: str,
                                metadata: Optional[NotificationMetadata] = None) -> None:
        """
        Send notification to all enabled webhooks

        Args:
            title: Notification title
            message: Notification message
            metadata: Optional task/execution context

        Note:
            Webhooks are attempted sequentially, each POST awaited before the
            next. Failures are logged as warnings and never propagated.
        """
        # Snapshot is immutable; the config lock is already released here
        settings = self.settings_provider.get_notification_settings()

        if not settings.webhook_notifications_enabled:
            logger.debug("Webhook notifications disabled - skipping notification")
            return

        for webhook in settings.webhooks:
            if not webhook.enabled:
                continue
            await self._deliver(webhook, title, message, metadata)

        if self.metrics:
            self.metrics.update_last_notification()

    def send_notification_sync(self, title: str, message: str,
                               metadata: Optional[NotificationMetadata] = None) -> None:
        """Blocking wrapper around send_notification() for code without an event loop"""
        asyncio.run(self.send_notification(title, message, metadata))

    async def test_connection(self) -> Dict[str, bool]:
        """
        Send a test notification to every enabled webhook

        The global switch is ignored so endpoints can be verified before
        notifications are turned on.

        Returns:
            Mapping of "<index>:<Provider>" to test result
        """
        settings = self.settings_provider.get_notification_settings()
        results: Dict[str, bool] = {}

        if not settings.enabled_webhooks:
            logger.warning("No webhooks to test")
            return results

        logger.info(f"Testing {len(settings.enabled_webhooks)} webhook(s)...")

        for index, webhook in enumerate(settings.webhooks):
            if not webhook.enabled:
                continue
            key = f"{index}:{webhook.provider.display_name}"
            logger.info(f"Testing {key}...")
            results[key] = await self._deliver(
                webhook,
                "Webhook Notify Test",
                f"Test notification - {webhook.provider.display_name} webhook is configured correctly!",
            )
            if results[key]:
                logger.info(f"✓ {key} test PASSED")
            else:
                logger.warning(f"⚠ {key} test FAILED")

        passed = sum(1 for ok in results.values() if ok)
        logger.info(f"Webhook test results: {passed}/{len(results)} passed")
        return results

    async def _deliver(self, webhook: WebhookConfig, title: str, message: str,
                       metadata: Optional[NotificationMetadata] = None) -> bool:
        """
        Send to one webhook, containing every failure

        Returns:
            True if the provider accepted the notification
        """
        notifier = create_notifier(webhook)
        provider = notifier.channel_name
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(
                None,
                partial(notifier.send_notification, self.session, title, message,
                        metadata, self.timeout)
            )
        except NotifierConfigError as e:
            self._record_failure(provider, "config", e)
            return False
        except requests.exceptions.HTTPError as e:
            self._record_failure(provider, "http", e)
            return False
        except requests.exceptions.RequestException as e:
            self._record_failure(provider, "transport", e)
            return False
        except Exception as e:
            logger.error(f"✗ Unexpected error sending {provider} webhook notification: {e}", exc_info=True)
            if self.metrics:
                self.metrics.record_failed(provider, "unexpected")
            return False

        if self.metrics:
            self.metrics.record_sent(provider)
        return True

    def _record_failure(self, provider: str, reason: str, error: Exception):
        logger.warning(f"Failed to send {provider} webhook notification: {error}")
        if self.metrics:
            self.metrics.record_failed(provider, reason)

    @property
    def enabled_channels(self) -> List[str]:
        """
        Get display names of webhooks that would currently receive notifications

        Returns:
            List of provider names (e.g., ["Slack", "Pushover"]), empty when
            the global switch is off
        """
        settings = self.settings_provider.get_notification_settings()
        if not settings.webhook_notifications_enabled:
            return []
        return [webhook.provider.display_name for webhook in settings.enabled_webhooks]

    def close(self):
        """Close the HTTP session if this service created it"""
        if self._owns_session:
            self.session.close()

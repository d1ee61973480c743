"""
Webhook notification providers for Webhook Notify

This package formats and delivers notifications to:
- Slack (Block Kit incoming webhooks)
- Discord (embeds)
- Pushover (mobile notifications)
- Telegram (bot sendMessage, HTML)
- Generic (flat JSON for custom integrations)

Usage:
    from webhook_notify.notifiers import WebhookNotificationService

    service = WebhookNotificationService(config)
    await service.send_notification("Title", "Message", metadata)
"""

from .base_notifier import BaseNotifier
from .discord_notifier import DiscordNotifier
from .pushover_notifier import PushoverNotifier
from .slack_notifier import SlackNotifier
from .telegram_notifier import TelegramNotifier
from .webhook_notifier import WebhookNotifier
from .webhook_service import NOTIFIER_CLASSES, WebhookNotificationService, create_notifier

__all__ = [
    "BaseNotifier",
    "DiscordNotifier",
    "PushoverNotifier",
    "SlackNotifier",
    "TelegramNotifier",
    "WebhookNotifier",
    "NOTIFIER_CLASSES",
    "WebhookNotificationService",
    "create_notifier",
]

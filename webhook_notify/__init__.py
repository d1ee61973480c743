"""
Webhook Notify Application Package
Sends task and execution lifecycle notifications to chat and alerting webhooks
"""

__version__ = "1.0.0"
__author__ = "Webhook Notify"

from .errors import ConfigError, NotifierConfigError
from .settings import NotificationMetadata, NotificationSettings, WebhookConfig, WebhookProvider
from .secrets_manager import SecretsManager
from .config_manager import ConfigManager, SettingsProvider, StaticSettingsProvider
from .notifiers import WebhookNotificationService

__all__ = [
    'ConfigError',
    'NotifierConfigError',
    'NotificationMetadata',
    'NotificationSettings',
    'WebhookConfig',
    'WebhookProvider',
    'SecretsManager',
    'ConfigManager',
    'SettingsProvider',
    'StaticSettingsProvider',
    'WebhookNotificationService',
]

"""
Configuration Manager for Webhook Notify
Handles loading and validation of JSON configuration with secrets support,
and hands out immutable notification settings snapshots under a read lock
"""

import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import pytz

from .errors import ConfigError
from .secrets_manager import SecretsManager
from .settings import NotificationSettings, WebhookProvider

logger = logging.getLogger(__name__)

VALID_LOGGING_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class SettingsProvider(Protocol):
    """Anything that can hand out the current notification settings snapshot"""

    def get_notification_settings(self) -> NotificationSettings:
        ...


class StaticSettingsProvider:
    """Settings provider backed by a fixed snapshot"""

    def __init__(self, settings: Optional[NotificationSettings] = None):
        self.settings = settings or NotificationSettings()

    def get_notification_settings(self) -> NotificationSettings:
        return self.settings


class ReadWriteLock:
    """
    Multiple-reader / single-writer lock

    Readers share the lock; a writer waits for active readers to drain and
    blocks new readers while it is waiting.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ConfigManager:
    """Manages application configuration from JSON file with secrets support"""

    def __init__(self, config_path: str = "/data/config.json",
                 secrets_manager: Optional[SecretsManager] = None):
        """
        Initialize configuration manager

        Args:
            config_path: Path to configuration JSON file
            secrets_manager: Secrets source (default: environment + Docker secrets)

        Raises:
            ConfigError: If the configuration file is missing or invalid
        """
        self.config_path = Path(config_path)
        self.secrets_manager = secrets_manager or SecretsManager(config_path)
        self._lock = ReadWriteLock()
        self._raw_config, self.config, self._settings = self.load_config()

    def load_config(self):
        """
        Load configuration from JSON file with secrets injection

        Returns:
            Tuple of (configuration as written in the file,
            configuration with secrets and defaults applied, NotificationSettings)

        Raises:
            ConfigError: If configuration file is missing or invalid
        """
        if not self.config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {self.config_path}. "
                "See examples/config.example.json for a template."
            )

        try:
            raw = self.secrets_manager.load_raw_config()
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}")

        if not isinstance(raw, dict):
            raise ConfigError("Configuration root must be a JSON object")

        config = self.secrets_manager.inject_secrets(raw)
        settings = self._validate_config(config)
        logger.info("Configuration loaded successfully")
        return raw, config, settings

    def _validate_config(self, config: Dict[str, Any]) -> NotificationSettings:
        """
        Validate configuration and apply defaults

        Args:
            config: Configuration dictionary to validate

        Returns:
            Parsed notification settings

        Raises:
            ConfigError: If any section is invalid
        """
        if "notifications" not in config:
            logger.warning("No 'notifications' section found - webhook notifications disabled")
        settings = NotificationSettings.from_dict(config.get("notifications"))
        self._validate_webhooks(settings)

        self._validate_http(config)
        self._validate_logging(config)
        return settings

    def _validate_webhooks(self, settings: NotificationSettings):
        """Warn about entries that will fail at send time; credentials are checked lazily"""
        if settings.webhook_notifications_enabled and not settings.enabled_webhooks:
            logger.warning("Webhook notifications enabled but no webhooks enabled")

        for index, webhook in enumerate(settings.webhooks):
            label = f"Webhook #{index} ({webhook.provider.display_name})"
            if not webhook.webhook_url.startswith(("https://", "http://")):
                logger.warning(f"{label}: URL is not http(s): {webhook.webhook_url}")
            if webhook.provider is WebhookProvider.PUSHOVER and not webhook.pushover_user_key:
                logger.warning(f"{label}: 'pushover_user_key' not configured")
            if webhook.provider is WebhookProvider.TELEGRAM and not webhook.telegram_chat_id:
                logger.warning(f"{label}: 'telegram_chat_id' not configured")

    def _validate_http(self, config: Dict[str, Any]):
        """Validate HTTP section and apply the default request timeout"""
        http = config.setdefault("http", {})
        timeout = http.setdefault("timeout", 10)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("Field 'http.timeout' must be a positive number")

    def _validate_logging(self, config: Dict[str, Any]):
        """
        Validate logging section (level, timezone)

        Invalid values fall back to defaults with a warning.
        """
        logging_config = config.setdefault("logging", {})

        level = str(logging_config.get("level") or "INFO").upper()
        if level not in VALID_LOGGING_LEVELS:
            logger.warning(f"Invalid logging level '{level}', using INFO")
            level = "INFO"
        logging_config["level"] = level

        tz_name = logging_config.get("timezone") or "UTC"
        try:
            pytz.timezone(tz_name)
        except pytz.exceptions.UnknownTimeZoneError:
            logger.warning(f"Invalid timezone '{tz_name}', falling back to 'UTC'")
            tz_name = "UTC"
        logging_config["timezone"] = tz_name

    def get_notification_settings(self) -> NotificationSettings:
        """
        Get the current notification settings snapshot

        The returned object is immutable, so callers may keep using it after
        the read lock is released.
        """
        with self._lock.read_locked():
            return self._settings

    def update_notification_settings(self, settings: NotificationSettings):
        """
        Replace notification settings (in memory; call save() to persist)

        Args:
            settings: New settings
        """
        with self._lock.write_locked():
            self._settings = settings
            self.config["notifications"] = settings.to_dict()
            self._raw_config["notifications"] = self.secrets_manager.strip_secrets(
                settings.to_dict(), self._raw_config.get("notifications"))
        logger.info("Notification settings updated")

    def save(self):
        """
        Write configuration back to the config file

        Credentials supplied by environment variables or Docker secrets are
        not written; the file keeps whatever it held for those fields.
        """
        with self._lock.read_locked():
            data = json.dumps(self._raw_config, indent=2, ensure_ascii=False)
        self.config_path.write_text(data + "\n", encoding="utf-8")
        logger.info(f"Configuration saved to {self.config_path}")

    _SENTINEL = object()

    def get(self, *keys, default=_SENTINEL) -> Optional[Any]:
        """
        Get configuration value using dot notation

        Args:
            *keys: Keys to traverse in configuration dictionary
            default: Value to return if key is not found (default: None)

        Returns:
            Configuration value, or default if not found

        Example:
            config.get("http", "timeout")  # Returns 10
            config.get("logging", "timezone", default="UTC")
        """
        fallback = None if default is self._SENTINEL else default

        with self._lock.read_locked():
            value = self.config
            for key in keys:
                if not isinstance(value, dict):
                    return fallback
                value = value.get(key)
                if value is None:
                    return fallback
            return value

    def reload(self):
        """
        Reload configuration from file

        The previous configuration stays active if the new one is invalid.

        Raises:
            ConfigError: If the file is missing or invalid
        """
        raw, config, settings = self.load_config()
        with self._lock.write_locked():
            self._raw_config = raw
            self.config = config
            self._settings = settings
        logger.info("Configuration reloaded")

"""
Notification settings and metadata model for Webhook Notify

Mirrors the `notifications` section of the configuration file:

    {
        "webhook_notifications_enabled": true,
        "webhooks": [
            {"enabled": true, "provider": "SLACK", "webhook_url": "https://..."}
        ]
    }
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
from uuid import UUID

from .errors import ConfigError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class WebhookProvider(str, Enum):
    """Supported webhook providers, serialized as upper-case tokens"""

    SLACK = "SLACK"
    DISCORD = "DISCORD"
    PUSHOVER = "PUSHOVER"
    TELEGRAM = "TELEGRAM"
    GENERIC = "GENERIC"

    @classmethod
    def _missing_(cls, value):
        # Hand-written config files often use lower case
        if isinstance(value, str):
            upper = value.strip().upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None

    @property
    def display_name(self) -> str:
        """Human-readable provider name for logging"""
        return self.value.capitalize()


@dataclass(frozen=True)
class WebhookConfig:
    """One configured webhook destination"""

    provider: WebhookProvider
    webhook_url: str
    enabled: bool = True
    pushover_user_key: Optional[str] = None
    pushover_api_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    # False sends title and message to Telegram as raw HTML
    telegram_escape_html: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to the config file shape

        Optional credentials that are not set are left out.
        """
        data: Dict[str, Any] = {
            "enabled": self.enabled,
            "provider": self.provider.value,
            "webhook_url": self.webhook_url,
        }
        for key in ("pushover_user_key", "pushover_api_token", "telegram_chat_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if not self.telegram_escape_html:
            data["telegram_escape_html"] = False
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebhookConfig":
        """
        Parse a webhook entry from the config file

        Args:
            data: Webhook entry dictionary

        Returns:
            WebhookConfig instance

        Raises:
            ConfigError: If provider or webhook_url is missing, or provider is unknown
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Webhook entry must be an object, got {type(data).__name__}")

        provider_raw = data.get("provider")
        if not provider_raw:
            raise ConfigError("Webhook entry is missing 'provider'")
        try:
            provider = WebhookProvider(provider_raw)
        except ValueError:
            valid = ", ".join(p.value for p in WebhookProvider)
            raise ConfigError(f"Unknown webhook provider: '{provider_raw}'. Valid providers: {valid}")

        webhook_url = data.get("webhook_url")
        if not webhook_url:
            raise ConfigError(f"{provider.display_name} webhook entry is missing 'webhook_url'")

        return cls(
            provider=provider,
            webhook_url=webhook_url,
            enabled=_bool_field(data, "enabled", True, f"{provider.display_name} webhook"),
            pushover_user_key=data.get("pushover_user_key") or None,
            pushover_api_token=data.get("pushover_api_token") or None,
            telegram_chat_id=_optional_str(data.get("telegram_chat_id")),
            telegram_escape_html=_bool_field(
                data, "telegram_escape_html", True, f"{provider.display_name} webhook"),
        )


@dataclass(frozen=True)
class NotificationSettings:
    """Global webhook switch plus the ordered list of webhooks"""

    webhook_notifications_enabled: bool = False
    webhooks: Tuple[WebhookConfig, ...] = ()

    @property
    def enabled_webhooks(self) -> Tuple[WebhookConfig, ...]:
        return tuple(webhook for webhook in self.webhooks if webhook.enabled)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "webhook_notifications_enabled": self.webhook_notifications_enabled,
            "webhooks": [webhook.to_dict() for webhook in self.webhooks],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NotificationSettings":
        """
        Parse the `notifications` config section

        Args:
            data: Section dictionary (None yields disabled defaults)

        Raises:
            ConfigError: If the section or any webhook entry is malformed
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Section 'notifications' must be an object")

        webhooks = data.get("webhooks") or []
        if not isinstance(webhooks, list):
            raise ConfigError("Field 'notifications.webhooks' must be a list")

        return cls(
            webhook_notifications_enabled=_bool_field(
                data, "webhook_notifications_enabled", False, "notifications"),
            webhooks=tuple(WebhookConfig.from_dict(entry) for entry in webhooks),
        )


def _bool_field(data: Dict[str, Any], key: str, default: bool, section: str) -> bool:
    """Read a JSON boolean, rejecting strings such as "false" and numbers"""
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Field '{key}' in {section} must be true or false, got {value!r}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    # Telegram chat ids are often written as bare numbers
    if value is None or value == "":
        return None
    return str(value)


def _as_uuid(value: Union[UUID, str]) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValueError(f"Invalid UUID: '{value}'")


@dataclass(frozen=True)
class NotificationMetadata:
    """
    Optional task/execution context attached to a notification

    All fields are independently optional. Instances are immutable; the
    with_* helpers return an updated copy so call sites can chain them:

        metadata = (
            NotificationMetadata()
            .with_task(task_id, "Fix login")
            .with_exit_code(1)
        )
    """

    task_id: Optional[UUID] = None
    task_title: Optional[str] = None
    project_id: Optional[UUID] = None
    project_name: Optional[str] = None
    workspace_id: Optional[UUID] = None
    execution_id: Optional[UUID] = None
    exit_code: Optional[int] = None

    def __post_init__(self):
        for name in ("task_id", "project_id", "workspace_id", "execution_id"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, UUID):
                object.__setattr__(self, name, _as_uuid(value))
        if self.exit_code is not None:
            if isinstance(self.exit_code, bool) or not isinstance(self.exit_code, int):
                raise ValueError(f"Exit code must be an integer, got {self.exit_code!r}")
            if not INT64_MIN <= self.exit_code <= INT64_MAX:
                raise ValueError(f"Exit code out of 64-bit range: {self.exit_code}")

    def with_task(self, task_id: Union[UUID, str], title: str) -> "NotificationMetadata":
        return replace(self, task_id=_as_uuid(task_id), task_title=title)

    def with_project(self, project_id: Union[UUID, str], name: str) -> "NotificationMetadata":
        return replace(self, project_id=_as_uuid(project_id), project_name=name)

    def with_workspace(self, workspace_id: Union[UUID, str]) -> "NotificationMetadata":
        return replace(self, workspace_id=_as_uuid(workspace_id))

    def with_execution(self, execution_id: Union[UUID, str]) -> "NotificationMetadata":
        return replace(self, execution_id=_as_uuid(execution_id))

    def with_exit_code(self, code: int) -> "NotificationMetadata":
        return replace(self, exit_code=code)

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.to_dict().values())

    def to_dict(self) -> Dict[str, Any]:
        """All seven fields, UUIDs as canonical strings, absent fields as None"""
        return {
            "task_id": _uuid_str(self.task_id),
            "task_title": self.task_title,
            "project_id": _uuid_str(self.project_id),
            "project_name": self.project_name,
            "workspace_id": _uuid_str(self.workspace_id),
            "execution_id": _uuid_str(self.execution_id),
            "exit_code": self.exit_code,
        }


def _uuid_str(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value is not None else None

"""
Test helpers for building settings and fake HTTP responses.
"""

from __future__ import annotations

from typing import List
from unittest.mock import MagicMock
from uuid import UUID

import requests

from webhook_notify.config_manager import StaticSettingsProvider
from webhook_notify.settings import NotificationSettings, WebhookConfig

TASK_ID = UUID("11111111-2222-3333-4444-555555555555")
PROJECT_ID = UUID("66666666-7777-8888-9999-000000000000")


def ok_response() -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status.return_value = None
    return response


def error_response(status: int = 500) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.raise_for_status.side_effect = requests.exceptions.HTTPError(
        f"{status} Server Error"
    )
    return response


def make_settings(*webhooks: WebhookConfig, enabled: bool = True) -> StaticSettingsProvider:
    return StaticSettingsProvider(
        NotificationSettings(webhook_notifications_enabled=enabled, webhooks=tuple(webhooks))
    )


def posted_urls(session: MagicMock) -> List[str]:
    return [c.args[0] for c in session.post.call_args_list]

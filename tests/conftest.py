"""
Shared fixtures for Webhook Notify tests.

No real network requests are made: the HTTP session is a MagicMock whose
post() returns a response object with a configurable raise_for_status().
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from tests.helpers import ok_response
from webhook_notify.settings import WebhookConfig, WebhookProvider


@pytest.fixture
def session() -> MagicMock:
    mock_session = MagicMock(spec=requests.Session)
    mock_session.post.return_value = ok_response()
    return mock_session


@pytest.fixture
def slack_webhook() -> WebhookConfig:
    return WebhookConfig(
        provider=WebhookProvider.SLACK,
        webhook_url="https://hooks.slack.com/services/xxx",
    )


@pytest.fixture
def pushover_webhook() -> WebhookConfig:
    return WebhookConfig(
        provider=WebhookProvider.PUSHOVER,
        webhook_url="https://api.pushover.net/1/messages.json?token=abc123",
        pushover_user_key="user_key_123",
    )


@pytest.fixture
def telegram_webhook() -> WebhookConfig:
    return WebhookConfig(
        provider=WebhookProvider.TELEGRAM,
        webhook_url="https://api.telegram.org/bot123/sendMessage",
        telegram_chat_id="-123456789",
    )

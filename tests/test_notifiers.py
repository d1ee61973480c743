"""
Unit tests for the provider formatters in webhook_notify.notifiers.

build_payload() is pure, so most tests only inspect the returned document.
The send_notification() tests use a mocked session.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
import requests

from tests.helpers import PROJECT_ID, TASK_ID, error_response
from webhook_notify.errors import NotifierConfigError
from webhook_notify.notifiers import (
    DiscordNotifier,
    PushoverNotifier,
    SlackNotifier,
    TelegramNotifier,
    WebhookNotifier,
)
from webhook_notify.settings import NotificationMetadata, WebhookConfig, WebhookProvider

EMPTY_METADATA = [None, NotificationMetadata()]


def _generic_webhook() -> WebhookConfig:
    return WebhookConfig(provider=WebhookProvider.GENERIC, webhook_url="https://example.com/hook")


def _discord_webhook() -> WebhookConfig:
    return WebhookConfig(provider=WebhookProvider.DISCORD, webhook_url="https://discord.com/api/webhooks/1/x")


def _assert_utc_timestamp(value: str) -> None:
    parsed = datetime.fromisoformat(value)
    assert parsed.tzinfo is not None
    assert parsed.utcoffset() == timedelta(0)


# ---- Slack ----

def test_slack_payload_with_project_and_exit_code(slack_webhook) -> None:
    metadata = NotificationMetadata(exit_code=1, project_name="demo")

    payload = SlackNotifier(slack_webhook).build_payload("Build Failed", "exit 1", metadata)

    header, section, context = payload["blocks"]
    assert header == {"type": "header", "text": {"type": "plain_text", "text": "Build Failed"}}
    assert section == {"type": "section", "text": {"type": "mrkdwn", "text": "exit 1"}}
    assert context["type"] == "context"
    assert context["elements"] == [
        {"type": "mrkdwn", "text": "*Project:* demo"},
        {"type": "mrkdwn", "text": "*Exit Code:* 1"},
    ]


def test_slack_context_includes_task_id(slack_webhook) -> None:
    metadata = NotificationMetadata(task_id=TASK_ID)

    payload = SlackNotifier(slack_webhook).build_payload("t", "m", metadata)

    assert payload["blocks"][-1]["elements"] == [
        {"type": "mrkdwn", "text": f"*Task ID:* {TASK_ID}"},
    ]


@pytest.mark.parametrize("metadata", EMPTY_METADATA)
def test_slack_omits_context_block_without_metadata(slack_webhook, metadata) -> None:
    payload = SlackNotifier(slack_webhook).build_payload("t", "m", metadata)

    assert [block["type"] for block in payload["blocks"]] == ["header", "section"]


def test_slack_ignores_fields_it_does_not_display(slack_webhook) -> None:
    metadata = NotificationMetadata(project_id=PROJECT_ID, task_title="x")

    payload = SlackNotifier(slack_webhook).build_payload("t", "m", metadata)

    assert len(payload["blocks"]) == 2


# ---- Discord ----

def test_discord_embed_with_all_fields() -> None:
    metadata = NotificationMetadata(
        task_id=TASK_ID, project_id=PROJECT_ID, project_name="demo", exit_code=-1,
    )

    payload = DiscordNotifier(_discord_webhook()).build_payload("Done", "All good", metadata)

    (embed,) = payload["embeds"]
    assert embed["title"] == "Done"
    assert embed["description"] == "All good"
    assert embed["color"] == 5814783
    _assert_utc_timestamp(embed["timestamp"])
    assert embed["fields"] == [
        {"name": "Project", "value": "demo", "inline": True},
        {"name": "Task ID", "value": str(TASK_ID), "inline": True},
        {"name": "Project ID", "value": str(PROJECT_ID), "inline": True},
        {"name": "Exit Code", "value": "-1", "inline": True},
    ]


@pytest.mark.parametrize("metadata", EMPTY_METADATA)
def test_discord_omits_fields_without_metadata(metadata) -> None:
    payload = DiscordNotifier(_discord_webhook()).build_payload("t", "m", metadata)

    assert "fields" not in payload["embeds"][0]


def test_discord_exit_code_zero_is_present() -> None:
    payload = DiscordNotifier(_discord_webhook()).build_payload("t", "m", NotificationMetadata(exit_code=0))

    assert payload["embeds"][0]["fields"] == [{"name": "Exit Code", "value": "0", "inline": True}]


# ---- Pushover ----

def test_pushover_extracts_token_from_url(pushover_webhook) -> None:
    notifier = PushoverNotifier(pushover_webhook)

    payload = notifier.build_payload("Build Failed", "exit 1")

    assert payload == {
        "token": "abc123",
        "user": "user_key_123",
        "title": "Build Failed",
        "message": "exit 1",
    }


def test_pushover_posts_to_fixed_api_url() -> None:
    webhook = WebhookConfig(
        provider=WebhookProvider.PUSHOVER,
        webhook_url="https://proxy.example.com/pushover?token=abc123",
        pushover_user_key="u",
    )

    assert PushoverNotifier(webhook).target_url == "https://api.pushover.net/1/messages.json"


def test_pushover_token_parameter_order_does_not_matter() -> None:
    webhook = WebhookConfig(
        provider=WebhookProvider.PUSHOVER,
        webhook_url="https://api.pushover.net/1/messages.json?priority=1&token=abc123&sound=none",
        pushover_user_key="u",
    )

    assert PushoverNotifier(webhook).build_payload("t", "m")["token"] == "abc123"


def test_pushover_explicit_token_takes_precedence(pushover_webhook) -> None:
    webhook = WebhookConfig(
        provider=WebhookProvider.PUSHOVER,
        webhook_url=pushover_webhook.webhook_url,
        pushover_user_key="u",
        pushover_api_token="explicit",
    )

    assert PushoverNotifier(webhook).build_payload("t", "m")["token"] == "explicit"


def test_pushover_appends_details_block(pushover_webhook) -> None:
    metadata = NotificationMetadata(project_name="demo", task_id=TASK_ID, exit_code=2)

    payload = PushoverNotifier(pushover_webhook).build_payload("t", "failed", metadata)

    assert payload["message"] == f"failed\n\nProject: demo\nTask ID: {TASK_ID}\nExit Code: 2"


def test_pushover_without_user_key_fails() -> None:
    webhook = WebhookConfig(
        provider=WebhookProvider.PUSHOVER,
        webhook_url="https://api.pushover.net/1/messages.json?token=abc123",
        pushover_user_key=None,
    )

    with pytest.raises(NotifierConfigError, match="user key"):
        PushoverNotifier(webhook).build_payload("t", "m")


@pytest.mark.parametrize(
    "url",
    [
        "https://api.pushover.net/1/messages.json",
        "https://api.pushover.net/1/messages.json?token=",
        "https://api.pushover.net/1/messages.json?app=abc123",
    ],
)
def test_pushover_without_token_fails(url: str) -> None:
    webhook = WebhookConfig(provider=WebhookProvider.PUSHOVER, webhook_url=url, pushover_user_key="u")

    with pytest.raises(NotifierConfigError, match="token"):
        PushoverNotifier(webhook).build_payload("t", "m")


# ---- Telegram ----

def test_telegram_html_message(telegram_webhook) -> None:
    metadata = NotificationMetadata(project_name="demo", task_id=TASK_ID, exit_code=0)

    payload = TelegramNotifier(telegram_webhook).build_payload("Build Failed", "exit 1", metadata)

    assert payload["chat_id"] == "-123456789"
    assert payload["parse_mode"] == "HTML"
    assert payload["text"] == (
        "<b>Build Failed</b>\n\nexit 1\n\n"
        "<b>Project:</b> demo\n"
        f"<b>Task ID:</b> {TASK_ID}\n"
        "<b>Exit Code:</b> 0"
    )


@pytest.mark.parametrize("metadata", EMPTY_METADATA)
def test_telegram_without_metadata(telegram_webhook, metadata) -> None:
    payload = TelegramNotifier(telegram_webhook).build_payload("Title", "Body", metadata)

    assert payload["text"] == "<b>Title</b>\n\nBody"


def test_telegram_escapes_user_text(telegram_webhook) -> None:
    payload = TelegramNotifier(telegram_webhook).build_payload("a < b", "x & y", NotificationMetadata(project_name="<p>"))

    assert payload["text"] == "<b>a &lt; b</b>\n\nx &amp; y\n\n<b>Project:</b> &lt;p&gt;"


def test_telegram_raw_html_when_escaping_disabled() -> None:
    webhook = WebhookConfig(
        provider=WebhookProvider.TELEGRAM,
        webhook_url="https://api.telegram.org/bot123/sendMessage",
        telegram_chat_id="-123456789",
        telegram_escape_html=False,
    )

    payload = TelegramNotifier(webhook).build_payload(
        "Deploy", "<i>staging</i> done", NotificationMetadata(project_name="<code>api</code>")
    )

    assert payload["text"] == "<b>Deploy</b>\n\n<i>staging</i> done\n\n<b>Project:</b> <code>api</code>"


def test_telegram_without_chat_id_fails() -> None:
    webhook = WebhookConfig(provider=WebhookProvider.TELEGRAM, webhook_url="https://api.telegram.org/bot1/sendMessage")

    with pytest.raises(NotifierConfigError, match="chat ID"):
        TelegramNotifier(webhook).build_payload("t", "m")


def test_telegram_posts_to_configured_url(telegram_webhook) -> None:
    assert TelegramNotifier(telegram_webhook).target_url == "https://api.telegram.org/bot123/sendMessage"


# ---- Generic ----

@pytest.mark.parametrize("metadata", EMPTY_METADATA)
def test_generic_payload_has_stable_keys(metadata) -> None:
    payload = WebhookNotifier(_generic_webhook()).build_payload("t", "m", metadata)

    assert set(payload) == {
        "title", "message", "timestamp",
        "task_id", "task_title", "project_id", "project_name",
        "workspace_id", "execution_id", "exit_code",
    }
    assert payload["task_id"] is None
    assert payload["exit_code"] is None
    _assert_utc_timestamp(payload["timestamp"])


def test_generic_payload_serializes_ids_as_strings() -> None:
    metadata = NotificationMetadata().with_task(TASK_ID, "Fix").with_project(PROJECT_ID, "demo").with_exit_code(3)

    payload = WebhookNotifier(_generic_webhook()).build_payload("t", "m", metadata)

    assert payload["task_id"] == str(TASK_ID)
    assert payload["task_title"] == "Fix"
    assert payload["project_id"] == str(PROJECT_ID)
    assert payload["project_name"] == "demo"
    assert payload["exit_code"] == 3


# ---- send_notification ----

def test_send_notification_posts_json(session, slack_webhook) -> None:
    SlackNotifier(slack_webhook).send_notification(session, "t", "m", timeout=3)

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args == ("https://hooks.slack.com/services/xxx",)
    assert kwargs["timeout"] == 3
    assert kwargs["json"]["blocks"][0]["text"]["text"] == "t"
    session.post.return_value.raise_for_status.assert_called_once()


def test_send_notification_raises_on_http_error(session, slack_webhook) -> None:
    session.post.return_value = error_response(404)

    with pytest.raises(requests.exceptions.HTTPError):
        SlackNotifier(slack_webhook).send_notification(session, "t", "m")


def test_send_notification_does_not_post_on_config_error(session) -> None:
    webhook = WebhookConfig(provider=WebhookProvider.TELEGRAM, webhook_url="https://api.telegram.org/bot1/sendMessage")

    with pytest.raises(NotifierConfigError):
        TelegramNotifier(webhook).send_notification(session, "t", "m")

    session.post.assert_not_called()

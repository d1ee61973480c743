#!/usr/bin/env python3
"""
Webhook Notify - Main Entry Point
Sends a task/execution notification to every configured webhook
(Slack, Discord, Pushover, Telegram, generic JSON)
"""

import argparse
import asyncio
import logging
import os
import sys

from webhook_notify import ConfigError, ConfigManager, NotificationMetadata, WebhookNotificationService
from webhook_notify.logging_config import setup_logging, apply_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser"""
    parser = argparse.ArgumentParser(
        description='Send webhook notifications for task and execution events',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Notify about a failed run
  python main.py send --title "Build Failed" --message "exit 1" --project-name demo --exit-code 1

  # Verify every enabled webhook
  python main.py test

  # Use custom config file
  python main.py --config /path/to/config.json test
        """
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to config.json (default: /data/config.json or ./config.json)',
        default=None
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    send = subparsers.add_parser('send', help='Send a notification')
    send.add_argument('--title', required=True, help='Notification title')
    send.add_argument('--message', required=True, help='Notification message')
    send.add_argument('--task-id', help='Task UUID')
    send.add_argument('--task-title', help='Task title')
    send.add_argument('--project-id', help='Project UUID')
    send.add_argument('--project-name', help='Project name')
    send.add_argument('--workspace-id', help='Workspace UUID')
    send.add_argument('--execution-id', help='Execution UUID')
    send.add_argument('--exit-code', type=int, help='Process exit code')

    subparsers.add_parser('test', help='Send a test notification to every enabled webhook')

    return parser


def build_metadata(args: argparse.Namespace) -> NotificationMetadata:
    """
    Build notification metadata from parsed `send` arguments

    Raises:
        ValueError: If an identifier is not a valid UUID
    """
    return NotificationMetadata(
        task_id=args.task_id,
        task_title=args.task_title,
        project_id=args.project_id,
        project_name=args.project_name,
        workspace_id=args.workspace_id,
        execution_id=args.execution_id,
        exit_code=args.exit_code,
    )


def default_config_path() -> str:
    return "/data/config.json" if os.path.exists("/data/config.json") else "config.json"


def main(argv=None) -> int:
    """Main entry point"""
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config or default_config_path())
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    apply_config(config)

    service = WebhookNotificationService(
        config,
        timeout=config.get("http", "timeout", default=10),
    )

    try:
        if args.command == 'test':
            results = asyncio.run(service.test_connection())
            return 0 if any(results.values()) else 1

        try:
            metadata = build_metadata(args)
        except ValueError as e:
            logger.error(f"Invalid metadata: {e}")
            return 2

        if service.enabled_channels:
            logger.info(f"Enabled webhooks: {', '.join(service.enabled_channels)}")
        else:
            logger.warning("No webhooks enabled - notification not sent")
        service.send_notification_sync(args.title, args.message, metadata)
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())

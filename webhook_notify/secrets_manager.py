"""
Secrets Manager for Webhook Notify
Handles secure loading of webhook credentials from various sources
"""

import copy
import os
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class SecretsManager:
    """
    Manages secure loading of secrets from multiple sources
    Priority order:
    1. Environment variables
    2. Docker secrets
    3. Config file
    """

    def __init__(self, config_path: str = "/data/config.json",
                 docker_secrets_path: str = "/run/secrets"):
        """
        Initialize secrets manager

        Args:
            config_path: Path to configuration file
            docker_secrets_path: Directory holding Docker secret files
        """
        self.config_path = Path(config_path)
        self.docker_secrets_path = Path(docker_secrets_path)

    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get secret value from available sources in priority order

        Args:
            key: Secret key to retrieve
            default: Default value if not found

        Returns:
            Secret value or default
        """
        # 1. Check environment variable
        env_value = os.getenv(key)
        if env_value:
            logger.debug(f"Secret '{key}' loaded from environment variable")
            return env_value

        # 2. Check Docker secrets
        docker_secret = self._read_docker_secret(key.lower())
        if docker_secret:
            logger.debug(f"Secret '{key}' loaded from Docker secret")
            return docker_secret

        # 3. Return default
        return default

    def _read_docker_secret(self, secret_name: str) -> Optional[str]:
        """
        Read secret from Docker secrets directory

        Args:
            secret_name: Name of the secret file

        Returns:
            Secret value or None
        """
        secret_file = self.docker_secrets_path / secret_name
        if secret_file.exists():
            try:
                with open(secret_file, 'r') as f:
                    return f.read().strip()
            except OSError as e:
                logger.warning(f"Failed to read Docker secret '{secret_name}': {e}")
        return None

    # provider -> [(webhook field, secret name)]
    SECRET_FIELDS = {
        "PUSHOVER": [
            ("pushover_user_key", "PUSHOVER_USER_KEY"),
            ("pushover_api_token", "PUSHOVER_API_TOKEN"),
        ],
        "TELEGRAM": [
            ("telegram_chat_id", "TELEGRAM_CHAT_ID"),
        ],
    }

    def load_raw_config(self) -> Any:
        """
        Load configuration file exactly as written, without secrets

        Returns:
            Parsed JSON document

        Raises:
            FileNotFoundError: If the configuration file does not exist
            json.JSONDecodeError: If the configuration file is not valid JSON
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file: {e}")
            raise

    def inject_secrets(self, config: Any) -> Any:
        """
        Return a copy of config with webhook credentials replaced by secrets

        A secret found in the environment or Docker secrets overrides the
        value from the config file. The input is not modified.

        Args:
            config: Configuration dictionary as loaded from file

        Returns:
            Configuration with secrets injected
        """
        config = copy.deepcopy(config)
        for webhook, field_name, secret_name in self._secret_slots(config):
            value = self.get_secret(secret_name)
            if value:
                webhook[field_name] = value
                logger.info(f"Webhook {field_name} loaded from secure source")
        return config

    def strip_secrets(self, notifications: Dict[str, Any],
                      original: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Remove credentials that come from a secret source before writing to disk

        Where the config file itself held a value for the same webhook (same
        position and provider), that file value is written back instead.

        Args:
            notifications: `notifications` section, e.g. NotificationSettings.to_dict()
            original: `notifications` section as read from the config file

        Returns:
            Copy of the section without secret-sourced credentials
        """
        stripped = copy.deepcopy({"notifications": notifications})
        original_webhooks = []
        if isinstance(original, dict) and isinstance(original.get("webhooks"), list):
            original_webhooks = original["webhooks"]

        webhooks = stripped["notifications"].get("webhooks") or []
        for webhook, field_name, secret_name in self._secret_slots(stripped):
            if field_name not in webhook or not self.get_secret(secret_name):
                continue
            del webhook[field_name]

            index = next(i for i, entry in enumerate(webhooks) if entry is webhook)
            if index < len(original_webhooks):
                source = original_webhooks[index]
                same_provider = (isinstance(source, dict) and
                                 str(source.get("provider", "")).upper() == str(webhook.get("provider", "")).upper())
                if same_provider and source.get(field_name):
                    webhook[field_name] = source[field_name]
        return stripped["notifications"]

    def _secret_slots(self, config: Any):
        """Yield (webhook dict, field, secret name) for every secret-capable webhook field"""
        if not isinstance(config, dict) or not isinstance(config.get("notifications"), dict):
            return
        webhooks = config["notifications"].get("webhooks")
        if not isinstance(webhooks, list):
            return

        for webhook in webhooks:
            if not isinstance(webhook, dict):
                continue
            provider = str(webhook.get("provider", "")).strip().upper()
            for field_name, secret_name in self.SECRET_FIELDS.get(provider, []):
                yield webhook, field_name, secret_name

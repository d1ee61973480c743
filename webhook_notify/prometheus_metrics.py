"""
Prometheus Metrics for Webhook Notify

Delivery metrics for processes that embed WebhookNotificationService and
stay up long enough to be scraped; the one-shot CLI does not start the
/metrics endpoint. Call start_server() from the embedding application.
"""

import logging
from datetime import datetime
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

FAILURE_REASONS = ("config", "transport", "http", "unexpected")


class PrometheusMetrics:
    """
    Prometheus metrics manager for webhook delivery

    Metrics exposed:
    - webhook_notifications_sent_total: Successful deliveries by provider
    - webhook_notifications_failed_total: Failed deliveries by provider and reason
    - webhook_last_notification_timestamp_seconds: Unix timestamp of last dispatch
    """

    def __init__(self, port: int = 8000, registry: Optional[CollectorRegistry] = None):
        """
        Initialize Prometheus metrics

        Args:
            port: HTTP server port for /metrics endpoint (default: 8000)
            registry: Collector registry (default: global registry)
        """
        self.port = port
        self.registry = registry if registry is not None else REGISTRY
        self._server_started = False

        # Metric: Successful deliveries (counter - only goes up)
        self.notifications_sent_total = Counter(
            'webhook_notifications_sent',
            'Total number of webhook notifications delivered',
            labelnames=['provider'],
            registry=self.registry
        )

        # Metric: Failed deliveries (counter - only goes up)
        self.notifications_failed_total = Counter(
            'webhook_notifications_failed',
            'Total number of webhook notifications that failed',
            labelnames=['provider', 'reason'],
            registry=self.registry
        )

        # Metric: Last dispatch timestamp (gauge - can go up and down)
        self.last_notification_timestamp = Gauge(
            'webhook_last_notification_timestamp',
            'Unix timestamp of last notification dispatch',
            unit='seconds',
            registry=self.registry
        )

    def start_server(self):
        """
        Start Prometheus HTTP server in background thread

        Exposes /metrics endpoint on configured port
        """
        if self._server_started:
            logger.warning(f"Prometheus server already running on port {self.port}")
            return

        try:
            start_http_server(self.port, addr='127.0.0.1', registry=self.registry)
            self._server_started = True
            logger.info(f"✓ Prometheus metrics server started on port {self.port}")
            logger.info(f"  Metrics endpoint: http://localhost:{self.port}/metrics")
        except OSError as e:
            logger.error(f"Failed to start Prometheus server on port {self.port}: {e}")
            logger.warning("Continuing without Prometheus metrics")

    def record_sent(self, provider: str):
        """Count a successful delivery for provider"""
        self.notifications_sent_total.labels(provider=provider).inc()
        logger.debug(f"Prometheus: Incremented notifications_sent_total[{provider}]")

    def record_failed(self, provider: str, reason: str):
        """
        Count a failed delivery

        Args:
            provider: Provider display name
            reason: One of config, transport, http, unexpected
        """
        if reason not in FAILURE_REASONS:
            reason = "unexpected"
        self.notifications_failed_total.labels(provider=provider, reason=reason).inc()
        logger.debug(f"Prometheus: Incremented notifications_failed_total[{provider}, {reason}]")

    def update_last_notification(self, timestamp: Optional[datetime] = None):
        """
        Update last dispatch timestamp metric

        Args:
            timestamp: Datetime of dispatch (defaults to now)
        """
        if timestamp is None:
            timestamp = datetime.now()
        self.last_notification_timestamp.set(timestamp.timestamp())

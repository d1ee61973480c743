"""
Timezone-aware logging configuration for Webhook Notify
"""

import sys
import logging
from datetime import datetime

import pytz

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class TzFormatter(logging.Formatter):
    """Logging formatter that uses a configured timezone for timestamps"""

    def __init__(self, fmt=None, datefmt=None, tz=None):
        super().__init__(fmt, datefmt)
        self.tz = tz

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime("%Y-%m-%d %H:%M:%S,%f")[:-3]


def setup_logging():
    """Initial logging setup with default (system) timezone"""
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def apply_config(config):
    """
    Reconfigure logging from config: timezone and logging level.

    Args:
        config: ConfigManager instance
    """
    level_name = (config.get("logging", "level", default="INFO") or "INFO").upper()
    if level_name not in VALID_LEVELS:
        logger.warning(f"Invalid logging level '{level_name}', using INFO")
        level_name = "INFO"
    logging.root.setLevel(getattr(logging, level_name))
    logger.info(f"Logging level set to {level_name}")

    tz_name = config.get("logging", "timezone", default="UTC")
    try:
        tz = pytz.timezone(tz_name)
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(f"Unknown logging timezone '{tz_name}' - keeping system timezone")
        return

    formatter = TzFormatter(LOG_FORMAT, tz=tz)
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)
    logger.info(f"Logging timezone set to {tz_name}")

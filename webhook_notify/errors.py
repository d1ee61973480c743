"""
Exception types for Webhook Notify
"""


class ConfigError(ValueError):
    """Configuration file or settings content is invalid"""


class NotifierConfigError(ConfigError):
    """A webhook is missing a credential its provider requires (detected at send time)"""

"""
Custom exceptions for the notification system.
"""


class NotificationError(Exception):
    """Base exception for notification system errors."""
    pass


class ConfigurationError(NotificationError):
    """Raised when a notification channel is misconfigured."""
    pass


class ChannelError(NotificationError):
    """Base exception for channel-specific errors."""

    def __init__(self, message: str, channel: str):
        super().__init__(message)
        self.channel = channel


class PushError(ChannelError):
    """Exception for Pushover delivery errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message, "push")
        self.status_code = status_code


class SMSError(ChannelError):
    """Exception for Twilio SMS errors."""

    def __init__(self, message: str, error_code: int = None):
        super().__init__(message, "sms")
        self.error_code = error_code


class AudioError(ChannelError):
    """Exception for playback and speech synthesis errors."""

    def __init__(self, message: str):
        super().__init__(message, "audio")

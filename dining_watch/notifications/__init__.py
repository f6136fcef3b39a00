"""
Notification system for Dining Watch.

Delivers detected openings over Pushover push, Twilio SMS (behind a
cooldown limiter) and local audio with optional text-to-speech.
"""

from dining_watch.notifications.notification_manager import NotificationManager
from dining_watch.notifications.models import (
    NotificationResult, NotificationChannel, NotificationStatus, NotificationTemplate
)
from dining_watch.notifications.push_sender import PushSender
from dining_watch.notifications.sms_sender import SMSSender
from dining_watch.notifications.sms_rate_limiter import SMSRateLimiter
from dining_watch.notifications.audio_notifier import AudioNotifier, AudioPlayer, SpeechSynthesizer
from dining_watch.notifications.formatters import PushFormatter, SMSFormatter, SpeechFormatter
from dining_watch.notifications.exceptions import (
    NotificationError, ConfigurationError, ChannelError, PushError, SMSError, AudioError
)

__all__ = [
    'NotificationManager',
    'NotificationResult',
    'NotificationChannel',
    'NotificationStatus',
    'NotificationTemplate',
    'PushSender',
    'SMSSender',
    'SMSRateLimiter',
    'AudioNotifier',
    'AudioPlayer',
    'SpeechSynthesizer',
    'PushFormatter',
    'SMSFormatter',
    'SpeechFormatter',
    'NotificationError',
    'ConfigurationError',
    'ChannelError',
    'PushError',
    'SMSError',
    'AudioError'
]

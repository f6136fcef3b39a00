"""
Data models for the notification system.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass
from datetime import datetime


class NotificationChannel(Enum):
    """Supported notification channels."""
    PUSH = "push"
    SMS = "sms"
    AUDIO = "audio"


class NotificationStatus(Enum):
    """Status of a notification delivery attempt."""
    SENT = "sent"
    FAILED = "failed"
    SUPPRESSED = "suppressed"


@dataclass
class NotificationResult:
    """Result of a notification delivery attempt."""
    channel: NotificationChannel
    status: NotificationStatus
    recipient: str = ""
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None

    @property
    def is_success(self) -> bool:
        """Check if notification was successfully sent."""
        return self.status == NotificationStatus.SENT

    @property
    def is_failure(self) -> bool:
        """Check if notification failed."""
        return self.status == NotificationStatus.FAILED


@dataclass
class NotificationTemplate:
    """Rendered notification content."""
    subject: Optional[str] = None
    text_content: str = ""

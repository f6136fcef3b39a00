"""
Push notification sender using the Pushover messages API.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import aiohttp

from dining_watch.notifications.exceptions import ConfigurationError, PushError
from dining_watch.notifications.models import (
    NotificationChannel, NotificationResult, NotificationStatus, NotificationTemplate
)


logger = logging.getLogger(__name__)


class PushSender:
    """
    Pushover sender.

    Delivers to a single user key. Failures are returned as FAILED results
    rather than raised, matching the other channel senders.
    """

    def __init__(self,
                 api_token: Optional[str],
                 user_key: Optional[str],
                 api_url: str = "https://api.pushover.net/1/messages.json",
                 timeout: float = 10.0):
        """
        Initialize push sender.

        Args:
            api_token: Pushover application token
            user_key: Pushover user key that receives every notification
            api_url: Pushover messages endpoint
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If the token or user key is missing
        """
        if not api_token or not user_key:
            raise ConfigurationError("Pushover credentials not found. Set PUSHOVER_TOKEN and PUSHOVER_USER")

        self.api_token = api_token
        self.user_key = user_key
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self._session: Optional[aiohttp.ClientSession] = None

        logger.info("Push sender initialized")

    async def _ensure_session(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def send(self, template: NotificationTemplate) -> NotificationResult:
        """
        Send a push notification.

        Args:
            template: ``subject`` is used as the title, ``text_content`` as the message

        Returns:
            NotificationResult with delivery status

        Raises:
            PushError: On transport errors or an unreadable response
        """
        await self._ensure_session()

        data = {
            "token": self.api_token,
            "user": self.user_key,
            "title": template.subject or "",
            "message": template.text_content,
        }

        try:
            async with self._session.post(self.api_url, data=data) as response:
                body = await response.json(content_type=None)
                if not isinstance(body, dict):
                    body = {}

                if response.status != 200 or body.get("status") != 1:
                    errors = ", ".join(body.get("errors", [])) or f"HTTP {response.status}"
                    logger.error(f"Pushover rejected notification: {errors}")
                    return NotificationResult(
                        channel=NotificationChannel.PUSH,
                        status=NotificationStatus.FAILED,
                        recipient=self.user_key,
                        error_message=f"Pushover error: {errors}"
                    )

                logger.info(f"Push notification sent: {template.subject}")
                return NotificationResult(
                    channel=NotificationChannel.PUSH,
                    status=NotificationStatus.SENT,
                    recipient=self.user_key,
                    message_id=body.get("request"),
                    sent_at=datetime.now()
                )

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise PushError(f"Push request failed: {e!r}") from e

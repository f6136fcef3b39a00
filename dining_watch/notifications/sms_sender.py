"""
SMS sender using the Twilio messaging API.
"""

import asyncio
import logging
from typing import List, Optional
from datetime import datetime

import aiohttp
from twilio.rest import Client
from twilio.http.async_http_client import AsyncTwilioHttpClient
from twilio.base.exceptions import TwilioRestException

from dining_watch.notifications.exceptions import ConfigurationError, SMSError
from dining_watch.notifications.models import (
    NotificationResult, NotificationChannel, NotificationStatus, NotificationTemplate
)


logger = logging.getLogger(__name__)


class SMSSender:
    """
    Twilio SMS sender.

    Uses Twilio's async HTTP client so sends run on the application's event
    loop. The same body goes to every configured recipient.
    """

    def __init__(self,
                 account_sid: Optional[str],
                 auth_token: Optional[str],
                 from_number: Optional[str],
                 recipients: List[str],
                 client: Optional[Client] = None):
        """
        Initialize SMS sender.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            from_number: Sending phone number
            recipients: Destination phone numbers
            client: Preconfigured Twilio client

        Raises:
            ConfigurationError: If credentials or recipients are missing
        """
        if not account_sid or not auth_token or not from_number:
            raise ConfigurationError(
                "Twilio credentials not found. Set TWILIO_SMS_ID, TWILIO_SMS_TOKEN and TWILIO_SMS_FROM"
            )
        if not recipients:
            raise ConfigurationError("No SMS recipients configured. Set TWILIO_SMS_TO")

        self.account_sid = account_sid
        self.from_number = from_number
        self.recipients = list(recipients)

        self._http_client: Optional[AsyncTwilioHttpClient] = None
        if client is None:
            self._http_client = AsyncTwilioHttpClient()
            client = Client(account_sid, auth_token, http_client=self._http_client)
        self.client = client

        logger.info(f"SMS sender initialized with {len(self.recipients)} recipients")

    async def close(self):
        if self._http_client is not None:
            await self._http_client.close()

    async def send_message(self, to_number: str, template: NotificationTemplate) -> NotificationResult:
        """
        Send an SMS to a single recipient.

        Args:
            to_number: Recipient phone number
            template: Message template with content

        Returns:
            NotificationResult with delivery status

        Raises:
            SMSError: On transport errors
        """
        try:
            logger.debug(f"Sending SMS to {to_number}")

            message = await self.client.messages.create_async(
                body=template.text_content,
                from_=self.from_number,
                to=to_number
            )

            logger.info(f"SMS sent successfully: {message.sid}")

            return NotificationResult(
                channel=NotificationChannel.SMS,
                status=NotificationStatus.SENT,
                recipient=to_number,
                message_id=message.sid,
                sent_at=datetime.now()
            )

        except TwilioRestException as e:
            error_msg = f"Twilio error: {e.msg} (Code: {e.code})"
            logger.error(f"Failed to send SMS to {to_number}: {error_msg}")

            return NotificationResult(
                channel=NotificationChannel.SMS,
                status=NotificationStatus.FAILED,
                recipient=to_number,
                error_message=error_msg
            )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SMSError(f"SMS request to {to_number} failed: {e!r}") from e

    async def send_bulk_messages(self,
                                 template: NotificationTemplate,
                                 recipients: Optional[List[str]] = None) -> List[NotificationResult]:
        """
        Send the same SMS to several recipients concurrently.

        Args:
            template: Message template with content
            recipients: Phone numbers, defaulting to the configured recipients

        Returns:
            List of NotificationResult objects in recipient order
        """
        recipients = recipients or self.recipients

        outcomes = await asyncio.gather(
            *(self.send_message(recipient, template) for recipient in recipients),
            return_exceptions=True
        )

        results = []
        for recipient, outcome in zip(recipients, outcomes):
            if isinstance(outcome, SMSError):
                logger.error(str(outcome))
                outcome = NotificationResult(
                    channel=NotificationChannel.SMS,
                    status=NotificationStatus.FAILED,
                    recipient=recipient,
                    error_message=str(outcome)
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)

        success_count = sum(1 for r in results if r.is_success)
        logger.info(f"SMS bulk send completed: {success_count}/{len(recipients)} successful")

        return results

"""
Notification manager for fanning an opening out to every enabled channel.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Deque, Dict, List, Optional
from datetime import datetime

from dining_watch.config.settings import Settings
from dining_watch.models.dining_models import OpeningEvent
from dining_watch.notifications.exceptions import ConfigurationError
from dining_watch.notifications.audio_notifier import AudioNotifier, AudioPlayer, SpeechSynthesizer
from dining_watch.notifications.formatters import PushFormatter, SMSFormatter
from dining_watch.notifications.models import NotificationChannel, NotificationResult, NotificationStatus
from dining_watch.notifications.push_sender import PushSender
from dining_watch.notifications.sms_rate_limiter import SMSRateLimiter
from dining_watch.notifications.sms_sender import SMSSender
from dining_watch.utils.error_handler import ErrorSeverity, GlobalErrorHandler, get_error_handler
from dining_watch.utils.scheduler import JobScheduler


logger = logging.getLogger(__name__)


class NotificationManager:
    """
    Dispatches each opening to push, SMS and audio concurrently.

    Channels are isolated from each other: an exception in one channel is
    logged, reported and turned into a FAILED result, and never prevents or
    cancels delivery on the others. A channel without a sender is disabled
    and yields no result.
    """

    def __init__(self,
                 push_sender: Optional[PushSender] = None,
                 sms_sender: Optional[SMSSender] = None,
                 sms_limiter: Optional[SMSRateLimiter] = None,
                 audio_notifier: Optional[AudioNotifier] = None,
                 utc_offset_minutes: int = -360,
                 error_handler: Optional[GlobalErrorHandler] = None,
                 history_size: int = 500):
        """
        Initialize notification manager.

        Args:
            push_sender: Pushover sender, None disables push
            sms_sender: Twilio sender, None disables SMS
            sms_limiter: Cooldown gate for SMS alerts, required with ``sms_sender``
            audio_notifier: Local audio alerts, None disables audio
            utc_offset_minutes: Venue UTC offset used to render push dates
            error_handler: Receives channel failures
            history_size: Number of results kept for status reporting
        """
        if sms_sender is not None and sms_limiter is None:
            raise ConfigurationError("SMS sender requires an SMS rate limiter")

        self.push_sender = push_sender
        self.sms_sender = sms_sender
        self.sms_limiter = sms_limiter
        self.audio_notifier = audio_notifier
        self.utc_offset_minutes = utc_offset_minutes
        self.error_handler = error_handler or get_error_handler()

        self.delivery_history: Deque[NotificationResult] = deque(maxlen=history_size)

        logger.info(f"Notification manager initialized with channels: {', '.join(self.enabled_channels) or 'none'}")

    @property
    def enabled_channels(self) -> List[str]:
        channels = []
        if self.push_sender is not None:
            channels.append(NotificationChannel.PUSH.value)
        if self.sms_sender is not None:
            channels.append(NotificationChannel.SMS.value)
        if self.audio_notifier is not None and self.audio_notifier.enabled:
            channels.append(NotificationChannel.AUDIO.value)
        return channels

    async def dispatch(self, event: OpeningEvent) -> List[NotificationResult]:
        """
        Send ``event`` on every enabled channel.

        Args:
            event: Detected opening

        Returns:
            Results from all channels; never raises for channel failures
        """
        logger.info(f"Dispatching opening for {event.venue_name} on {event.date.isoformat()}")

        channel_calls = []
        if self.push_sender is not None:
            channel_calls.append(self._run_channel(NotificationChannel.PUSH, self._send_push(event)))
        if self.sms_sender is not None:
            channel_calls.append(self._run_channel(NotificationChannel.SMS, self._send_sms(event)))
        if self.audio_notifier is not None and self.audio_notifier.enabled:
            channel_calls.append(self._run_channel(NotificationChannel.AUDIO, self._play_audio(event)))

        if not channel_calls:
            logger.debug("No notification channels enabled, opening not dispatched")
            return []

        per_channel = await asyncio.gather(*channel_calls)
        results = [result for channel_results in per_channel for result in channel_results]

        self.delivery_history.extend(results)
        self._log_delivery_summary(results)

        return results

    async def _run_channel(self,
                           channel: NotificationChannel,
                           call: Awaitable[List[NotificationResult]]) -> List[NotificationResult]:
        try:
            return await call
        except Exception as e:
            logger.error(f"{channel.value.title()} notification failed: {e}")
            self.error_handler.report_error(
                e,
                component=f"notifications.{channel.value}",
                severity=ErrorSeverity.LOW
            )
            return [NotificationResult(
                channel=channel,
                status=NotificationStatus.FAILED,
                error_message=str(e)
            )]

    async def _send_push(self, event: OpeningEvent) -> List[NotificationResult]:
        template = PushFormatter.format_opening(event, self.utc_offset_minutes)
        return [await self.push_sender.send(template)]

    async def _send_sms(self, event: OpeningEvent) -> List[NotificationResult]:
        if not await self.sms_limiter.acquire():
            return [NotificationResult(
                channel=NotificationChannel.SMS,
                status=NotificationStatus.SUPPRESSED,
                error_message="SMS paused"
            )]

        template = SMSFormatter.format_opening(event)
        return await self.sms_sender.send_bulk_messages(template)

    async def _play_audio(self, event: OpeningEvent) -> List[NotificationResult]:
        return [await self.audio_notifier.notify(event)]

    def get_delivery_status(self) -> Dict[str, Any]:
        """
        Get delivery status summary.

        Returns:
            Dictionary with delivery statistics
        """
        if not self.delivery_history:
            return {"total": 0, "successful": 0, "failed": 0, "suppressed": 0}

        total = len(self.delivery_history)
        successful = sum(1 for r in self.delivery_history if r.is_success)
        failed = sum(1 for r in self.delivery_history if r.is_failure)
        suppressed = sum(1 for r in self.delivery_history if r.status == NotificationStatus.SUPPRESSED)

        by_channel = {}
        for channel in NotificationChannel:
            channel_results = [r for r in self.delivery_history if r.channel == channel]
            if channel_results:
                by_channel[channel.value] = {
                    "total": len(channel_results),
                    "successful": sum(1 for r in channel_results if r.is_success),
                    "failed": sum(1 for r in channel_results if r.is_failure)
                }

        return {
            "total": total,
            "successful": successful,
            "failed": failed,
            "suppressed": suppressed,
            "success_rate": successful / total,
            "by_channel": by_channel,
            "last_updated": datetime.now().isoformat()
        }

    def _log_delivery_summary(self, results: List[NotificationResult]):
        """Log summary of delivery results."""
        by_channel = {}
        for result in results:
            stats = by_channel.setdefault(result.channel.value, {"sent": 0, "failed": 0, "suppressed": 0})
            if result.is_success:
                stats["sent"] += 1
            elif result.status == NotificationStatus.SUPPRESSED:
                stats["suppressed"] += 1
            else:
                stats["failed"] += 1

        for channel, stats in by_channel.items():
            logger.info(
                f"{channel.title()}: {stats['sent']} sent, {stats['failed']} failed, "
                f"{stats['suppressed']} suppressed"
            )

    def start(self):
        """Start channel timers."""
        if self.sms_limiter is not None:
            self.sms_limiter.start()

    async def close(self):
        """Cancel channel timers and release sender resources."""
        if self.sms_limiter is not None:
            await self.sms_limiter.flush_notices()
            self.sms_limiter.shutdown()
        if self.audio_notifier is not None:
            await self.audio_notifier.close()
        if self.push_sender is not None:
            await self.push_sender.close()
        if self.sms_sender is not None:
            await self.sms_sender.close()

    @staticmethod
    def create_from_settings(settings: Settings,
                             scheduler: JobScheduler,
                             error_handler: Optional[GlobalErrorHandler] = None) -> 'NotificationManager':
        """
        Build senders for every enabled channel.

        A sender that fails to initialize is logged and its channel disabled.

        Returns:
            Configured NotificationManager instance
        """
        config = settings.notifications
        audio = settings.audio

        push_sender = None
        sms_sender = None
        sms_limiter = None
        audio_notifier = None

        try:
            if config.enable_push:
                push_sender = PushSender(
                    api_token=config.pushover_token,
                    user_key=config.pushover_user,
                    api_url=config.pushover_api_url
                )
        except Exception as e:
            logger.warning(f"Failed to initialize push sender: {e}")

        try:
            if config.enable_sms:
                sms_sender = SMSSender(
                    account_sid=config.twilio_sms_id,
                    auth_token=config.twilio_sms_token,
                    from_number=config.twilio_sms_from,
                    recipients=config.sms_recipients
                )
                sms_limiter = SMSRateLimiter(
                    sms_sender,
                    scheduler,
                    threshold=config.sms_threshold,
                    pause_minutes=config.sms_pause_minutes,
                    cycle_minutes=config.sms_cycle_minutes
                )
        except Exception as e:
            logger.warning(f"Failed to initialize SMS sender: {e}")
            sms_sender = None
            sms_limiter = None

        try:
            if config.audio_enabled:
                synthesizer = None
                if config.enable_tts_audio:
                    synthesizer = SpeechSynthesizer(
                        api_key=audio.tts_api_key,
                        base_url=audio.tts_base_url,
                        model=audio.tts_model,
                        voice=audio.tts_voice,
                        timeout=audio.tts_timeout_seconds
                    )
                audio_notifier = AudioNotifier(
                    player=AudioPlayer(audio.player_command, audio.unmute_command),
                    scheduler=scheduler,
                    synthesizer=synthesizer,
                    play_alert_sound=config.enable_notif_audio,
                    speak=config.enable_tts_audio,
                    override_mute=config.override_mute,
                    alert_sound_path=audio.alert_sound_path,
                    alert_sound_seconds=audio.alert_sound_seconds,
                    temp_dir=settings.temp_dir,
                    cleanup_seconds=audio.tts_cleanup_seconds,
                    utc_offset_minutes=config.venue_utc_offset_minutes
                )
        except Exception as e:
            logger.warning(f"Failed to initialize audio notifier: {e}")

        return NotificationManager(
            push_sender=push_sender,
            sms_sender=sms_sender,
            sms_limiter=sms_limiter,
            audio_notifier=audio_notifier,
            utc_offset_minutes=config.venue_utc_offset_minutes,
            error_handler=error_handler
        )

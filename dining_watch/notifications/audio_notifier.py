"""
Local audio alerts: an alert sound and a spoken summary of the opening.

Speech is synthesized over HTTP, written to a uniquely named temporary file
and played with the configured player command. Each file is removed by a
one-shot scheduler job a fixed time later, whether or not playback finished.
"""

import asyncio
import logging
import os
import shlex
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import aiohttp

from dining_watch.models.dining_models import OpeningEvent
from dining_watch.notifications.exceptions import AudioError, ConfigurationError
from dining_watch.notifications.formatters import SpeechFormatter
from dining_watch.notifications.models import NotificationChannel, NotificationResult, NotificationStatus
from dining_watch.utils.error_handler import ErrorSeverity, handle_errors
from dining_watch.utils.scheduler import JobScheduler


logger = logging.getLogger(__name__)


class AudioPlayer:
    """Spawns the local audio player and the unmute command."""

    def __init__(self, player_command: str = "afplay", unmute_command: Optional[str] = None):
        self.player_command = shlex.split(player_command)
        self.unmute_command = shlex.split(unmute_command) if unmute_command else []

    async def play(self, path: str) -> asyncio.subprocess.Process:
        """
        Start playing ``path`` without waiting for playback to finish.

        Raises:
            AudioError: If the player cannot be started
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.player_command, path,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            raise AudioError(f"Could not start audio player {self.player_command[0]}: {e}") from e

        logger.debug(f"Playing {path} (pid {process.pid})")
        return process

    async def unmute(self):
        """
        Force system audio unmuted.

        Raises:
            AudioError: If no unmute command is configured or it fails
        """
        if not self.unmute_command:
            raise AudioError("No unmute command configured")

        try:
            process = await asyncio.create_subprocess_exec(
                *self.unmute_command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            raise AudioError(f"Could not run unmute command: {e}") from e

        return_code = await process.wait()
        if return_code != 0:
            raise AudioError(f"Unmute command exited with status {return_code}")


class SpeechSynthesizer:
    """Text-to-speech over an OpenAI-compatible ``/audio/speech`` endpoint."""

    def __init__(self,
                 api_key: Optional[str],
                 base_url: str = "https://api.openai.com/v1",
                 model: str = "tts-1",
                 voice: str = "alloy",
                 timeout: float = 30.0):
        if not api_key:
            raise ConfigurationError("Text-to-speech API key not found. Set TTS_API_KEY")

        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/audio/speech"
        self.model = model
        self.voice = voice
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={'Authorization': f'Bearer {self.api_key}'}
            )

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def synthesize(self, text: str) -> bytes:
        """
        Convert ``text`` to MP3 audio.

        Raises:
            AudioError: On transport errors or a non-200 response
        """
        await self._ensure_session()

        payload = {"model": self.model, "voice": self.voice, "input": text}

        try:
            async with self._session.post(self.url, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    raise AudioError(f"Speech synthesis failed with HTTP {response.status}: {body[:200]}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AudioError(f"Speech synthesis request failed: {e!r}") from e


class AudioNotifier:
    """
    Plays the alert sound and speaks the opening.

    Steps run in order: unmute (if enabled), alert sound followed by a fixed
    pause (if enabled), then speech (if enabled).
    """

    def __init__(self,
                 player: AudioPlayer,
                 scheduler: JobScheduler,
                 synthesizer: Optional[SpeechSynthesizer] = None,
                 play_alert_sound: bool = False,
                 speak: bool = False,
                 override_mute: bool = False,
                 alert_sound_path: str = "assets/alert.mp3",
                 alert_sound_seconds: float = 2.0,
                 temp_dir: str = "tmp",
                 cleanup_seconds: float = 15,
                 utc_offset_minutes: int = -360):
        """
        Initialize audio notifier.

        Args:
            player: Spawns the player and unmute processes
            scheduler: Runs the temporary file cleanup jobs
            synthesizer: Text-to-speech client, required when ``speak`` is set
            play_alert_sound: Play ``alert_sound_path`` before speaking
            speak: Speak a summary of the opening
            override_mute: Run the unmute command first
            alert_sound_path: Alert sound file
            alert_sound_seconds: Pause after starting the alert sound
            temp_dir: Directory for synthesized audio files
            cleanup_seconds: Delay before a synthesized file is deleted
            utc_offset_minutes: Venue UTC offset used to render the date

        Raises:
            ConfigurationError: If speech is enabled without a synthesizer
        """
        if speak and synthesizer is None:
            raise ConfigurationError("Spoken alerts enabled but no speech synthesizer configured")

        self.player = player
        self.scheduler = scheduler
        self.synthesizer = synthesizer
        self.play_alert_sound = play_alert_sound
        self.speak = speak
        self.override_mute = override_mute
        self.alert_sound_path = alert_sound_path
        self.alert_sound_seconds = alert_sound_seconds
        self.temp_dir = temp_dir
        self.cleanup_seconds = cleanup_seconds
        self.utc_offset_minutes = utc_offset_minutes

        # job id -> temp file path
        self._pending_files: Dict[str, str] = {}

        logger.info(
            f"Audio notifier initialized (alert sound: {play_alert_sound}, speech: {speak}, "
            f"override mute: {override_mute})"
        )

    @property
    def enabled(self) -> bool:
        return self.play_alert_sound or self.speak

    async def notify(self, event: OpeningEvent) -> NotificationResult:
        """
        Play the audio alert for ``event``.

        Raises:
            AudioError: If any enabled step fails
        """
        if self.override_mute:
            await self.player.unmute()

        if self.play_alert_sound:
            await self.player.play(self.alert_sound_path)
            await asyncio.sleep(self.alert_sound_seconds)

        if self.speak:
            sentence = SpeechFormatter.format_opening(event, self.utc_offset_minutes).text_content
            audio = await self.synthesizer.synthesize(sentence)
            path = self._write_temp_file(audio)
            await self.player.play(path)
            logger.info(f"Spoke opening for {event.venue_name}")

        return NotificationResult(
            channel=NotificationChannel.AUDIO,
            status=NotificationStatus.SENT,
            recipient="local",
            sent_at=datetime.now()
        )

    def _write_temp_file(self, audio: bytes) -> str:
        """Write ``audio`` to a unique file and schedule its removal."""
        Path(self.temp_dir).mkdir(parents=True, exist_ok=True)

        file_id = uuid.uuid4()
        path = os.path.join(self.temp_dir, f"tts-{file_id}.mp3")
        with open(path, 'wb') as f:
            f.write(audio)

        job_id = f"tts_cleanup_{file_id}"
        self._pending_files[job_id] = path
        self.scheduler.add_delayed_job(
            job_id,
            self._cleanup_job,
            delay_seconds=self.cleanup_seconds,
            args=(job_id,)
        )

        return path

    async def _cleanup_job(self, job_id: str):
        self._remove_temp_file(job_id)

    @handle_errors("audio", severity=ErrorSeverity.LOW, reraise=False)
    def _remove_temp_file(self, job_id: str):
        path = self._pending_files.pop(job_id, None)
        if path and os.path.exists(path):
            os.remove(path)
            logger.debug(f"Removed temporary audio file {path}")

    def cleanup_pending(self):
        """Cancel pending cleanup jobs and delete their files now."""
        for job_id in list(self._pending_files):
            self.scheduler.remove_job(job_id)
            self._remove_temp_file(job_id)

    async def close(self):
        self.cleanup_pending()
        if self.synthesizer is not None:
            await self.synthesizer.close()

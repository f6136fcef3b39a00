"""
Configuration management for Dining Watch.

Handles environment variables, .env files and validation of the search,
notification, audio and logging settings with type safety.
"""

import os
import sys
import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, List, Dict, Any, Annotated
from enum import Enum

try:
    from dotenv import load_dotenv
    from pydantic import Field, field_validator, model_validator
    from pydantic_settings import BaseSettings, NoDecode
except ImportError as e:
    print(f"Missing required dependency: {e}")
    print("Please install: pip install python-dotenv pydantic-settings")
    sys.exit(1)


DEFAULT_RESTAURANT_NAMES = [
    "Victoria & Albert's The Dining Room",
    "Victoria & Albert's Queen Victoria Room",
    "Space 220",
    "Space 220 Lounge",
]


class Environment(str, Enum):
    """Deployment environment types."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DiningAPIConfig(BaseSettings):
    """Dining reservation provider API configuration."""

    base_url: str = Field("https://mousedining.com/v1", description="Provider API base URL")
    timeout_seconds: int = Field(30, description="Request timeout in seconds")
    user_agent: str = Field("Dining-Watch/1.0", description="User-Agent header sent upstream")

    @field_validator('base_url')
    def base_url_must_be_valid(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError('Base URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('timeout_seconds')
    def timeout_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('Timeout must be positive')
        return v

    model_config = {"env_prefix": "DINING_"}


class SearchConfig(BaseSettings):
    """What to search for and how often."""

    start_date: date = Field(default_factory=date.today, description="First date of the stay (YYYY-MM-DD)")
    stay_length_days: int = Field(5, description="Number of days searched from the start date")
    party_size: int = Field(2, description="Number of guests")
    check_interval_ms: int = Field(10000, description="Delay between check passes in milliseconds")
    restaurant_names: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_RESTAURANT_NAMES),
        description="Exact venue names as listed by the provider (JSON list or '|' separated)"
    )

    @field_validator('restaurant_names', mode='before')
    def parse_restaurant_names(cls, v):
        """Accept a JSON list or a '|' separated string."""
        if isinstance(v, str):
            text = v.strip()
            if text.startswith('['):
                v = json.loads(text)
            else:
                v = text.split('|')
        return [name.strip() for name in v if name and name.strip()]

    @field_validator('restaurant_names')
    def restaurant_names_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('At least one restaurant name is required')
        return v

    @field_validator('stay_length_days', 'party_size', 'check_interval_ms')
    def must_be_positive(cls, v, info):
        if v <= 0:
            raise ValueError(f'{info.field_name} must be positive')
        return v

    @property
    def check_interval_seconds(self) -> float:
        return self.check_interval_ms / 1000.0

    model_config = {"env_prefix": "SEARCH_"}


class NotificationConfig(BaseSettings):
    """Notification channel switches, credentials and SMS throttling."""

    # Channel switches
    enable_push: bool = Field(True, description="Enable Pushover push notifications")
    enable_sms: bool = Field(False, description="Enable Twilio SMS notifications")
    enable_notif_audio: bool = Field(False, description="Play an alert sound on openings")
    enable_tts_audio: bool = Field(False, description="Speak openings through text-to-speech")
    override_mute: bool = Field(False, description="Force system audio unmuted before playing")

    # Pushover
    pushover_token: Optional[str] = Field(None, description="Pushover application token", alias="PUSHOVER_TOKEN")
    pushover_user: Optional[str] = Field(None, description="Pushover user key", alias="PUSHOVER_USER")
    pushover_api_url: str = Field("https://api.pushover.net/1/messages.json", description="Pushover messages endpoint")

    # Twilio SMS
    twilio_sms_id: Optional[str] = Field(None, description="Twilio account SID", alias="TWILIO_SMS_ID")
    twilio_sms_token: Optional[str] = Field(None, description="Twilio auth token", alias="TWILIO_SMS_TOKEN")
    twilio_sms_from: Optional[str] = Field(None, description="Twilio sending number", alias="TWILIO_SMS_FROM")
    twilio_sms_to: str = Field("", description="'&' separated recipient numbers", alias="TWILIO_SMS_TO")

    # SMS throttling
    sms_threshold: int = Field(5, description="SMS sends per cycle before pausing")
    sms_pause_minutes: int = Field(3, description="Length of an SMS pause")
    sms_cycle_minutes: int = Field(5, description="SMS counter reset window")

    # Rendering
    venue_utc_offset_minutes: int = Field(-360, description="Venue-local UTC offset used to render dates")

    @field_validator('sms_threshold', 'sms_pause_minutes', 'sms_cycle_minutes')
    def throttle_values_must_be_positive(cls, v, info):
        if v <= 0:
            raise ValueError(f'{info.field_name} must be positive')
        return v

    @model_validator(mode='after')
    def validate_notification_channels(self):
        """Check credentials of every enabled channel."""
        if self.enable_sms:
            if not self.twilio_sms_id or not self.twilio_sms_token or not self.twilio_sms_from:
                raise ValueError('SMS enabled but missing required Twilio credentials')
            if not self.sms_recipients:
                raise ValueError('SMS enabled but TWILIO_SMS_TO has no recipients')

        if self.enable_push and not (self.pushover_token and self.pushover_user):
            logging.warning("Push enabled but PUSHOVER_TOKEN/PUSHOVER_USER missing - push notifications will be disabled")
            self.enable_push = False

        return self

    @property
    def sms_recipients(self) -> List[str]:
        """Recipient phone numbers parsed from TWILIO_SMS_TO."""
        return [number.strip() for number in self.twilio_sms_to.split('&') if number.strip()]

    @property
    def audio_enabled(self) -> bool:
        return self.enable_notif_audio or self.enable_tts_audio

    model_config = {"env_prefix": "NOTIFICATION_", "populate_by_name": True}


class AudioConfig(BaseSettings):
    """Local audio playback and text-to-speech configuration."""

    alert_sound_path: str = Field("assets/alert.mp3", description="Alert sound played before speech")
    alert_sound_seconds: float = Field(2.0, description="Pause after the alert sound before speaking")
    player_command: str = Field("afplay", description="Command used to play audio files")
    unmute_command: str = Field(
        "osascript -e 'set volume without output muted'",
        description="Command that forces system audio unmuted"
    )
    tts_cleanup_seconds: int = Field(15, description="Delay before a spoken audio file is deleted")

    # Text-to-speech HTTP API
    tts_api_key: Optional[str] = Field(None, description="Text-to-speech API key", alias="TTS_API_KEY")
    tts_base_url: str = Field("https://api.openai.com/v1", description="Text-to-speech API base URL")
    tts_model: str = Field("tts-1", description="Text-to-speech model")
    tts_voice: str = Field("alloy", description="Text-to-speech voice")
    tts_timeout_seconds: int = Field(30, description="Text-to-speech request timeout")

    @field_validator('tts_base_url')
    def tts_base_url_must_be_valid(cls, v):
        if not v.startswith(('http://', 'https://')):
            raise ValueError('TTS base URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('alert_sound_seconds')
    def pause_must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError('alert_sound_seconds cannot be negative')
        return v

    model_config = {"env_prefix": "AUDIO_", "populate_by_name": True}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Default log level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    # File logging
    enable_file_logging: bool = Field(True, description="Enable file logging")
    log_file: str = Field("logs/dining_watch.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, description="Maximum log file size in bytes")
    backup_count: int = Field(5, description="Number of backup log files")

    # Console logging
    enable_console_logging: bool = Field(True, description="Enable console logging")
    console_level: LogLevel = Field(LogLevel.INFO, description="Console log level")

    # Structured logging
    enable_json_logging: bool = Field(False, description="Enable JSON structured logging")

    def to_logger_config(self) -> Dict[str, Any]:
        """Dictionary accepted by utils.logger.setup_logging."""
        config = self.model_dump()
        config['level'] = self.level.value
        config['console_level'] = self.console_level.value
        return config

    model_config = {"env_prefix": "LOG_"}


class Settings(BaseSettings):
    """Main application settings."""

    environment: Environment = Field(Environment.DEVELOPMENT, description="Deployment environment")
    debug: bool = Field(False, description="Enable debug mode")
    app_name: str = Field("Dining Watch", description="Application name")
    app_version: str = Field("1.0.0", description="Application version")

    opening_log_file: str = Field("reservation-openings-log.txt", description="Append-only log of detected openings")
    temp_dir: str = Field("tmp", description="Directory for temporary audio files")

    dining: DiningAPIConfig = Field(default_factory=DiningAPIConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('environment', mode='before')
    def validate_environment(cls, v):
        """Validate and normalize environment."""
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                raise ValueError(f'Invalid environment: {v}. Must be one of: {list(Environment)}')
        return v

    @model_validator(mode='after')
    def validate_environment_settings(self):
        """Apply environment-specific validation and defaults."""
        if self.environment == Environment.PRODUCTION:
            if self.debug:
                raise ValueError('Debug mode cannot be enabled in production')
            if not self.dining.base_url.startswith('https://'):
                raise ValueError('Production environment requires HTTPS for API calls')

        if self.notifications.enable_tts_audio and not self.audio.tts_api_key:
            logging.warning("TTS enabled but TTS_API_KEY missing - spoken alerts will be disabled")
            self.notifications.enable_tts_audio = False

        return self

    def create_directories(self):
        """Create required directories if they don't exist."""
        directories = [self.temp_dir]

        for path in (self.logging.log_file, self.opening_log_file):
            parent = os.path.dirname(path)
            if parent:
                directories.append(parent)

        for directory in directories:
            Path(directory).mkdir(parents=True, exist_ok=True)

    def get_configuration_summary(self) -> Dict[str, Any]:
        """Non-secret summary of the effective configuration."""
        return {
            "environment": self.environment.value,
            "restaurants": len(self.search.restaurant_names),
            "start_date": self.search.start_date.isoformat(),
            "party_size": self.search.party_size,
            "stay_length_days": self.search.stay_length_days,
            "check_interval_ms": self.search.check_interval_ms,
            "channels": {
                "push": self.notifications.enable_push,
                "sms": self.notifications.enable_sms,
                "notif_audio": self.notifications.enable_notif_audio,
                "tts_audio": self.notifications.enable_tts_audio,
            },
            "sms_recipients": len(self.notifications.sms_recipients),
        }

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load application settings from environment variables and .env file.

    Args:
        env_file: Optional path to .env file

    Returns:
        Configured Settings instance

    Raises:
        ValueError: If configuration is invalid
        FileNotFoundError: If the given env file does not exist
    """
    if env_file:
        if not os.path.exists(env_file):
            raise FileNotFoundError(f"Environment file not found: {env_file}")
        load_dotenv(env_file, override=True)
    else:
        for possible_env_file in [".env", ".env.local", f".env.{os.getenv('ENVIRONMENT', 'development')}"]:
            if os.path.exists(possible_env_file):
                load_dotenv(possible_env_file, override=False)

    try:
        settings = Settings()
        settings.create_directories()
        return settings

    except Exception as e:
        print(f"Error loading settings: {e}")
        print("\nPlease check your environment variables and .env file configuration.")
        print("Common environment variables:")
        print("- SEARCH_START_DATE, SEARCH_PARTY_SIZE, SEARCH_RESTAURANT_NAMES")
        print("- PUSHOVER_TOKEN / PUSHOVER_USER for push notifications")
        print("- TWILIO_SMS_ID / TWILIO_SMS_TOKEN / TWILIO_SMS_FROM / TWILIO_SMS_TO for SMS")
        print("- TTS_API_KEY for spoken alerts")
        raise


def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    if not hasattr(get_settings, '_cached_settings'):
        get_settings._cached_settings = load_settings()

    return get_settings._cached_settings


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Returns:
        Fresh Settings instance
    """
    if hasattr(get_settings, '_cached_settings'):
        delattr(get_settings, '_cached_settings')

    return get_settings()

"""
Unit tests for configuration settings.
"""

import pytest
from datetime import date
from unittest.mock import patch

from pydantic import ValidationError

from dining_watch.config.settings import (
    Settings, SearchConfig, NotificationConfig, DiningAPIConfig, DEFAULT_RESTAURANT_NAMES
)


SMS_ENV = {
    'NOTIFICATION_ENABLE_SMS': 'true',
    'TWILIO_SMS_ID': 'AC123',
    'TWILIO_SMS_TOKEN': 'secret',
    'TWILIO_SMS_FROM': '+15550000000',
    'TWILIO_SMS_TO': '+15551111111&+15552222222'
}


class TestSearchConfig:
    """Test search configuration."""

    def test_defaults(self):
        with patch.dict('os.environ', {}, clear=True):
            config = SearchConfig()

        assert config.stay_length_days == 5
        assert config.party_size == 2
        assert config.check_interval_ms == 10000
        assert config.check_interval_seconds == 10.0
        assert config.restaurant_names == DEFAULT_RESTAURANT_NAMES

    def test_from_environment(self):
        with patch.dict('os.environ', {
            'SEARCH_START_DATE': '2024-01-29',
            'SEARCH_PARTY_SIZE': '4',
            'SEARCH_RESTAURANT_NAMES': 'Space 220| Space 220 Lounge '
        }, clear=True):
            config = SearchConfig()

        assert config.start_date == date(2024, 1, 29)
        assert config.party_size == 4
        assert config.restaurant_names == ["Space 220", "Space 220 Lounge"]

    def test_restaurant_names_json_list(self):
        with patch.dict('os.environ', {
            'SEARCH_RESTAURANT_NAMES': '["Victoria & Albert\'s The Dining Room", "Space 220"]'
        }, clear=True):
            config = SearchConfig()

        assert config.restaurant_names == ["Victoria & Albert's The Dining Room", "Space 220"]

    def test_empty_restaurant_names_rejected(self):
        with patch.dict('os.environ', {}, clear=True):
            with pytest.raises(ValidationError, match="At least one restaurant name"):
                SearchConfig(restaurant_names=[])

    @pytest.mark.parametrize("field", ['party_size', 'stay_length_days', 'check_interval_ms'])
    def test_non_positive_values_rejected(self, field):
        with patch.dict('os.environ', {}, clear=True):
            with pytest.raises(ValidationError, match=f"{field} must be positive"):
                SearchConfig(**{field: 0})


class TestNotificationConfig:
    """Test notification channel validation."""

    def test_push_disabled_without_credentials(self):
        with patch.dict('os.environ', {}, clear=True):
            config = NotificationConfig()

        assert config.enable_push is False
        assert not config.audio_enabled
        assert not hasattr(config, "any_channel_enabled")

    def test_push_enabled_with_credentials(self):
        with patch.dict('os.environ', {'PUSHOVER_TOKEN': 'app', 'PUSHOVER_USER': 'user'}, clear=True):
            config = NotificationConfig()

        assert config.enable_push is True
        assert config.pushover_token == 'app'

    def test_sms_recipients_split_on_ampersand(self):
        with patch.dict('os.environ', SMS_ENV, clear=True):
            config = NotificationConfig()

        assert config.enable_sms is True
        assert config.sms_recipients == ['+15551111111', '+15552222222']

    def test_sms_enabled_without_credentials_raises(self):
        with patch.dict('os.environ', {'NOTIFICATION_ENABLE_SMS': 'true'}, clear=True):
            with pytest.raises(ValidationError, match="missing required Twilio credentials"):
                NotificationConfig()

    def test_sms_enabled_without_recipients_raises(self):
        env = dict(SMS_ENV, TWILIO_SMS_TO='')
        with patch.dict('os.environ', env, clear=True):
            with pytest.raises(ValidationError, match="no recipients"):
                NotificationConfig()

    def test_throttle_defaults(self):
        with patch.dict('os.environ', {}, clear=True):
            config = NotificationConfig()

        assert config.sms_threshold == 5
        assert config.sms_pause_minutes == 3
        assert config.sms_cycle_minutes == 5


class TestSettings:
    """Test top-level settings."""

    def test_invalid_base_url(self):
        with patch.dict('os.environ', {'DINING_BASE_URL': 'ftp://example.com'}, clear=True):
            with pytest.raises(ValidationError):
                DiningAPIConfig()

    def test_tts_disabled_without_api_key(self):
        with patch.dict('os.environ', {'NOTIFICATION_ENABLE_TTS_AUDIO': 'true'}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.notifications.enable_tts_audio is False

    def test_tts_kept_with_api_key(self):
        with patch.dict('os.environ', {
            'NOTIFICATION_ENABLE_TTS_AUDIO': 'true',
            'TTS_API_KEY': 'sk-test'
        }, clear=True):
            settings = Settings(_env_file=None)

        assert settings.notifications.enable_tts_audio is True
        assert settings.notifications.audio_enabled

    def test_production_rejects_debug(self):
        with patch.dict('os.environ', {'ENVIRONMENT': 'production', 'DEBUG': 'true'}, clear=True):
            with pytest.raises(ValidationError, match="Debug mode cannot be enabled in production"):
                Settings(_env_file=None)

    def test_configuration_summary_has_no_secrets(self):
        env = dict(SMS_ENV, PUSHOVER_TOKEN='app', PUSHOVER_USER='user')
        with patch.dict('os.environ', env, clear=True):
            settings = Settings(_env_file=None)

        summary = settings.get_configuration_summary()

        assert summary['channels']['sms'] is True
        assert summary['sms_recipients'] == 2
        assert 'secret' not in str(summary)

    def test_create_directories(self, tmp_path):
        with patch.dict('os.environ', {}, clear=True):
            settings = Settings(
                _env_file=None,
                temp_dir=str(tmp_path / "tmp"),
                opening_log_file=str(tmp_path / "data" / "openings.txt")
            )
        settings.logging.log_file = str(tmp_path / "logs" / "app.log")

        settings.create_directories()

        assert (tmp_path / "tmp").is_dir()
        assert (tmp_path / "data").is_dir()
        assert (tmp_path / "logs").is_dir()

"""
Configuration module for Dining Watch.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    DiningAPIConfig,
    SearchConfig,
    NotificationConfig,
    AudioConfig,
    LoggingConfig,
    load_settings,
    get_settings,
    reload_settings
)

__all__ = [
    'Settings',
    'Environment',
    'LogLevel',
    'DiningAPIConfig',
    'SearchConfig',
    'NotificationConfig',
    'AudioConfig',
    'LoggingConfig',
    'load_settings',
    'get_settings',
    'reload_settings'
]

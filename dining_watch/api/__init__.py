"""
Dining reservation provider API integration for Dining Watch.
"""

from dining_watch.api.dining_client import (
    DiningClient,
    DiningError,
    DiningAPIError,
    DiningParseError
)

__all__ = [
    'DiningClient',
    'DiningError',
    'DiningAPIError',
    'DiningParseError'
]

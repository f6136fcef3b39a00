"""
Polling and detection components for Dining Watch.

Resolves venue names into targets, polls them on a fixed interval and
detects the first bookable date in each response.
"""

from .target_resolver import TargetResolver, resolve_targets
from .availability_detector import find_first_opening, detect_opening
from .opening_log import OpeningLog
from .poller import OpeningPoller

__all__ = [
    'TargetResolver',
    'resolve_targets',
    'find_first_opening',
    'detect_opening',
    'OpeningLog',
    'OpeningPoller'
]

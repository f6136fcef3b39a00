"""
Dining Watch - reservation availability watcher.

Polls a dining reservation provider for a fixed set of venues and alerts
through push, SMS and voice channels when a table opens up.
"""

__version__ = "1.0.0"
__author__ = "Dining Watch Team"

__all__ = [
    "__version__",
]

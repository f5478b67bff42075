"""Models package for Joker Draw."""

from .notifications import Notification, NotificationType

__all__ = [
    "Notification",
    "NotificationType",
]

"""Notification engine — periodic outdated-dependency emails."""

from depwatch.engines.notification.mailer import Mailer
from depwatch.engines.notification.runner import NotificationRunner

__all__ = ["Mailer", "NotificationRunner"]

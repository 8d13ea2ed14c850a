"""Notification sinks.

Services that want to tell the user something (income detected, bonus
completed) receive a sink explicitly instead of reaching for a global.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from finledger.domain.entities import AlertPriority

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    priority: AlertPriority = AlertPriority.MEDIUM
    transaction_id: Optional[int] = None


class NotificationSink(ABC):
    """Destination for user-facing notifications."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver a notification."""
        pass


class LoggingSink(NotificationSink):
    """Writes notifications to the log. Used when no other sink is given."""

    def notify(self, notification: Notification) -> None:
        logger.info("%s: %s", notification.title, notification.message)

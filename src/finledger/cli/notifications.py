"""Notification sink that writes to the terminal."""

import click

from finledger.domain.entities import AlertPriority
from finledger.domain.notifications import Notification, NotificationSink


class ClickSink(NotificationSink):
    """Echo notifications as they happen."""

    def notify(self, notification: Notification) -> None:
        marker = "!" if notification.priority == AlertPriority.HIGH else "*"
        click.echo(f"{marker} {notification.title}: {notification.message}")

"""Notification dispatcher boundary.

The lifecycle hands events to a dispatcher after its transaction commits.
Delivery is best-effort: ``dispatch_safely`` logs and swallows every
failure so a broken channel can never fail or roll back a transition.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

import structlog
from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string

from fulfillment.domain.events import LifecycleEvent

logger = structlog.get_logger(__name__)


class NotificationDispatcher(ABC):
    """Receives lifecycle events and forwards them to a delivery channel."""

    @abstractmethod
    def notify(self, event: LifecycleEvent) -> None:
        ...


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Writes events to the log only."""

    def notify(self, event: LifecycleEvent) -> None:
        logger.info(
            "notification",
            event_type=event.event_type.value,
            audience=event.audience.value,
            request_id=str(event.request_id),
            message=event.message,
        )


class DatabaseNotificationDispatcher(NotificationDispatcher):
    """Stores events as Notification rows for the in-app inbox."""

    def notify(self, event: LifecycleEvent) -> None:
        from fulfillment.models import Notification

        # Savepoint, so a failed insert leaves any enclosing transaction usable.
        with transaction.atomic():
            Notification.objects.create(
                event_type=event.event_type.value,
                audience=event.audience.value,
                request_id=event.request_id.value,
                resident_id=event.resident_id.value if event.resident_id else None,
                message=event.message,
                data=dict(event.data),
            )


def dispatch_safely(dispatcher: NotificationDispatcher, events: Iterable[LifecycleEvent]) -> int:
    """Deliver each event, returning how many were accepted."""
    delivered = 0
    for event in events:
        try:
            dispatcher.notify(event)
        except Exception:
            logger.exception(
                "notification_failed",
                event_type=event.event_type.value,
                audience=event.audience.value,
                request_id=str(event.request_id),
            )
            continue
        delivered += 1
    return delivered


def get_dispatcher() -> NotificationDispatcher:
    """Build the dispatcher named by the NOTIFICATION_DISPATCHER setting."""
    return import_string(settings.NOTIFICATION_DISPATCHER)()

from fulfillment.notifications.dispatcher import (
    DatabaseNotificationDispatcher,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    dispatch_safely,
    get_dispatcher,
)

__all__ = [
    "DatabaseNotificationDispatcher",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "dispatch_safely",
    "get_dispatcher",
]

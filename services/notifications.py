"""
Per-user notification fan-out, plus per-venue booking change streams.

NotificationBus stands in for the backend's change stream: the datastore
publishes every inserted notification and each callback registered for that
user receives the record, in arrival order. Venue subscribers receive
`(event, booking)` for every booking inserted or updated at that venue.
Subscriptions live only in process memory.

NotificationFeed is the client-side view of one user's notifications with a
derived unread count.
"""
import logging
import threading
from collections import defaultdict

from domain import Notification
from services.errors import AuthRequiredError, NotFoundError

logger = logging.getLogger(__name__)


class BookingEvent:
    INSERT = "insert"
    UPDATE = "update"


class NotificationBus:
    def __init__(self):
        self._subscribers = defaultdict(list)
        self._venue_subscribers = defaultdict(list)
        self._lock = threading.Lock()

    def _register(self, registry, key, callback):
        with self._lock:
            registry[key].append(callback)

        def unsubscribe():
            with self._lock:
                callbacks = registry.get(key)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                if callbacks is not None and not callbacks:
                    del registry[key]

        return unsubscribe

    def _deliver(self, registry, key, *payload) -> int:
        with self._lock:
            callbacks = list(registry.get(key, ()))
        for callback in callbacks:
            try:
                callback(*payload)
            except Exception:
                # one broken listener must not starve the rest
                logger.exception("Subscriber callback failed for %s", key)
        return len(callbacks)

    def subscribe(self, user_id, callback):
        """Register `callback` for `user_id`; returns a function that removes it."""
        return self._register(self._subscribers, user_id, callback)

    def publish(self, notification) -> int:
        return self._deliver(self._subscribers, notification.user_id, notification)

    def subscriber_count(self, user_id) -> int:
        with self._lock:
            return len(self._subscribers.get(user_id, ()))

    def subscribe_venue(self, venue_id, callback):
        """`callback(event, booking)` for each booking change at `venue_id`."""
        return self._register(self._venue_subscribers, venue_id, callback)

    def publish_booking(self, event, booking) -> int:
        return self._deliver(self._venue_subscribers, booking.venue_id, event, booking)


class NotificationFeed:
    def __init__(self, store, bus, user_id, limit=10):
        if user_id is None:
            raise AuthRequiredError()
        self.store = store
        self.bus = bus
        self.user_id = user_id
        self.limit = limit
        self.notifications = []
        self.unread_count = 0
        self._unsubscribe = None

    def load(self):
        self.notifications = list(self.store.list_notifications(self.user_id, self.limit))
        self.unread_count = sum(1 for n in self.notifications if not n.is_read)
        return self.notifications

    def start(self):
        self.load()
        if self._unsubscribe is None:
            self._unsubscribe = self.bus.subscribe(self.user_id, self.on_notification)
        return self

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_notification(self, notification):
        self.notifications = [notification] + self.notifications
        self.notifications = self.notifications[: self.limit]
        if not notification.is_read:
            self.unread_count += 1

    def mark_as_read(self, notification_id):
        existing = self.store.get_notification(notification_id)
        if existing is None or existing.user_id != self.user_id:
            raise NotFoundError("Notification not found")
        self.store.mark_notification_read(notification_id)
        for n in self.notifications:
            if n.id == notification_id:
                n.is_read = True
        if not existing.is_read:
            self.unread_count = max(0, self.unread_count - 1)

    def mark_all_as_read(self):
        self.store.mark_all_notifications_read(self.user_id)
        for n in self.notifications:
            n.is_read = True
        self.unread_count = 0


def notify(store, user_id, title, message, type=None, entity_type=None, entity_id=None):
    """Backend-side helper: persist a notification for a domain event."""
    return store.create_notification(Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
    ))

from datetime import date, time
from decimal import Decimal

import pytest

from domain import BookingStatus, Notification, VenueBooking
from services import bookings
from services.errors import AuthRequiredError, ConflictError, NotFoundError
from services.notifications import BookingEvent, NotificationBus, NotificationFeed, notify


def _note(user_id, title="Hello", is_read=False):
    return Notification(user_id=user_id, title=title, message="...", is_read=is_read)


def _booking(booking_id, venue_id):
    return VenueBooking(
        id=booking_id, venue_id=venue_id, user_id=1, booking_date=date(2023, 9, 1),
        start_time=time(10), end_time=time(12), total_price=Decimal("60"),
    )


# ---------- bus ----------
def test_bus_delivers_only_to_the_target_user():
    bus = NotificationBus()
    alice, bob = [], []
    bus.subscribe(1, alice.append)
    bus.subscribe(2, bob.append)

    assert bus.publish(_note(1)) == 1
    assert len(alice) == 1 and bob == []


def test_unsubscribe():
    bus = NotificationBus()
    received = []
    unsubscribe = bus.subscribe(1, received.append)
    unsubscribe()
    unsubscribe()

    assert bus.publish(_note(1)) == 0
    assert received == []
    assert bus.subscriber_count(1) == 0


def test_failing_callback_does_not_block_others():
    bus = NotificationBus()
    received = []

    def broken(_):
        raise RuntimeError("listener crashed")

    bus.subscribe(1, broken)
    bus.subscribe(1, received.append)
    assert bus.publish(_note(1)) == 2
    assert len(received) == 1


# ---------- feed ----------
def test_feed_requires_a_user(store, bus):
    with pytest.raises(AuthRequiredError):
        NotificationFeed(store, bus, None)


def test_feed_receives_pushed_notifications(store, bus, player):
    feed = NotificationFeed(store, bus, player.id).start()
    assert feed.notifications == [] and feed.unread_count == 0

    notify(store, player.id, "Booking confirmed", "See you on court")
    notify(store, player.id, "Rental confirmed", "Bike is ready")

    assert [n.title for n in feed.notifications] == ["Rental confirmed", "Booking confirmed"]
    assert feed.unread_count == 2

    feed.stop()
    notify(store, player.id, "Late", "not delivered")
    assert len(feed.notifications) == 2


def test_feed_is_capped(store, bus, player):
    for i in range(12):
        notify(store, player.id, f"n{i}", "...")
    feed = NotificationFeed(store, bus, player.id, limit=10).start()
    assert len(feed.notifications) == 10
    assert feed.notifications[0].title == "n11"

    notify(store, player.id, "n12", "...")
    assert len(feed.notifications) == 10
    assert feed.notifications[0].title == "n12"
    assert store.count_unread(player.id) == 13


def test_mark_as_read(store, bus, player):
    first = notify(store, player.id, "a", "...")
    notify(store, player.id, "b", "...")
    feed = NotificationFeed(store, bus, player.id)
    feed.load()

    feed.mark_as_read(first.id)
    assert feed.unread_count == 1
    # already read: the count must not drop again
    feed.mark_as_read(first.id)
    assert feed.unread_count == 1
    assert store.count_unread(player.id) == 1


def test_cannot_read_someone_elses_notification(store, bus, player, other_player):
    theirs = notify(store, other_player.id, "private", "...")
    feed = NotificationFeed(store, bus, player.id)
    with pytest.raises(NotFoundError):
        feed.mark_as_read(theirs.id)
    assert store.count_unread(other_player.id) == 1


def test_mark_all_as_read_twice(store, bus, player, other_player):
    for title in ("a", "b", "c"):
        notify(store, player.id, title, "...")
    notify(store, other_player.id, "theirs", "...")
    feed = NotificationFeed(store, bus, player.id)
    feed.load()

    feed.mark_all_as_read()
    assert feed.unread_count == 0
    feed.mark_all_as_read()
    assert feed.unread_count == 0

    assert store.count_unread(player.id) == 0
    assert store.count_unread(other_player.id) == 1
    assert store.mark_all_notifications_read(player.id) == 0


# ---------- venue booking stream ----------
def test_venue_stream_is_scoped_to_one_venue():
    bus = NotificationBus()
    court, pitch = [], []
    bus.subscribe_venue(1, lambda event, booking: court.append((event, booking.id)))
    unsubscribe = bus.subscribe_venue(2, lambda event, booking: pitch.append((event, booking.id)))

    assert bus.publish_booking(BookingEvent.INSERT, _booking(7, venue_id=1)) == 1
    assert court == [("insert", 7)] and pitch == []

    unsubscribe()
    assert bus.publish_booking(BookingEvent.UPDATE, _booking(8, venue_id=2)) == 0
    # user feeds never see booking events
    assert bus.subscriber_count(1) == 0


def test_venue_stream_follows_a_booking(store, bus, venue, owner, player):
    events = []
    bus.subscribe_venue(venue.id, lambda event, booking: events.append((event, booking.status)))

    booking = bookings.check_and_create_booking(
        store, player.id, venue.id, date(2023, 9, 1), time(10), time(12), today=date(2023, 8, 1)
    )
    bookings.change_booking_status(store, booking.id, BookingStatus.CONFIRMED, owner)
    store.update_booking_payment(booking.id, "paid", "pay_123")

    assert events == [
        (BookingEvent.INSERT, BookingStatus.PENDING),
        (BookingEvent.UPDATE, BookingStatus.CONFIRMED),
        (BookingEvent.UPDATE, BookingStatus.CONFIRMED),
    ]


def test_rejected_booking_publishes_nothing(store, bus, venue, player, other_player):
    events = []
    bus.subscribe_venue(venue.id, lambda event, booking: events.append(event))
    day, today = date(2023, 9, 1), date(2023, 8, 1)

    bookings.check_and_create_booking(store, player.id, venue.id, day, time(10), time(12), today=today)
    with pytest.raises(ConflictError):
        bookings.check_and_create_booking(store, other_player.id, venue.id, day, time(11), time(13), today=today)
    assert events == [BookingEvent.INSERT]

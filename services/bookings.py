import logging
from datetime import date

from domain import BookingStatus, PaymentStatus, UserRole, VenueBooking
from services.conflicts import booking_price, within_opening_hours
from services.errors import AuthRequiredError, ForbiddenError, NotFoundError, ValidationError
from services.notifications import notify

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED: ("Booking confirmed", "is confirmed"),
    BookingStatus.CANCELLED: ("Booking cancelled", "has been cancelled"),
    BookingStatus.COMPLETED: ("Booking completed", "is complete. Thanks for playing!"),
}


def validate_booking_request(booking_date, start_time, end_time, today=None):
    if start_time >= end_time:
        raise ValidationError("start_time must be before end_time")
    if booking_date < (today or date.today()):
        raise ValidationError("booking_date is in the past")


def check_and_create_booking(store, user_id, venue_id, booking_date, start_time, end_time,
                             notes=None, today=None):
    """
    Create a pending booking for [start_time, end_time) on `booking_date`.

    The price is computed here from the venue's hourly rate; callers never
    supply it. Raises ValidationError, NotFoundError or ConflictError, and
    writes nothing in any of those cases.
    """
    if user_id is None:
        raise AuthRequiredError()
    validate_booking_request(booking_date, start_time, end_time, today=today)

    venue = store.get_venue(venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    windows = store.list_venue_availability(venue_id)
    if not within_opening_hours(windows, booking_date.weekday(), start_time, end_time):
        raise ValidationError("Venue is closed for the selected time slot")

    candidate = VenueBooking(
        venue_id=venue.id,
        user_id=user_id,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        total_price=booking_price(venue.hourly_price, start_time, end_time),
        status=BookingStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        notes=notes,
    )
    booking = store.create_booking(candidate)
    logger.info("Booking %s created for venue %s by user %s", booking.id, venue.id, user_id)
    return booking


def ensure_transition(current, new):
    if new not in BookingStatus.ALL:
        raise ValidationError(f"Invalid status: {new}")
    if current == new:
        return False
    if new not in BookingStatus.TRANSITIONS[current]:
        raise ValidationError(f"Cannot change status from {current} to {new}")
    return True


def _can_manage_venue(store, actor, venue_id):
    if actor.role == UserRole.ADMIN:
        return True
    venue = store.get_venue(venue_id)
    return venue is not None and venue.owner_id == actor.id


def change_booking_status(store, booking_id, status, actor):
    """
    Customers may only cancel their own bookings; the venue owner and admins
    may move a booking along any allowed transition.
    """
    if actor is None:
        raise AuthRequiredError()
    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    is_customer = booking.user_id == actor.id
    is_manager = _can_manage_venue(store, actor, booking.venue_id)
    if not is_manager and not (is_customer and status == BookingStatus.CANCELLED):
        if not is_customer:
            raise NotFoundError("Booking not found")
        raise ForbiddenError("Only the venue owner can change this booking")

    if not ensure_transition(booking.status, status):
        return booking

    updated = store.update_booking_status(booking_id, status, expected_status=booking.status)
    title, verb = STATUS_MESSAGES[status]
    venue_name = (updated.venue_details or {}).get("name", "the venue")
    notify(
        store,
        updated.user_id,
        title,
        f"Your booking at {venue_name} on {updated.booking_date.isoformat()} "
        f"{updated.start_time.strftime('%H:%M')}-{updated.end_time.strftime('%H:%M')} {verb}",
        type="booking",
        entity_type="venue_booking",
        entity_id=updated.id,
    )
    return updated


def cancel_booking(store, booking_id, actor):
    return change_booking_status(store, booking_id, BookingStatus.CANCELLED, actor)


def list_bookings_for_venue(store, venue_id, actor, booking_date=None):
    if actor is None:
        raise AuthRequiredError()
    if store.get_venue(venue_id) is None:
        raise NotFoundError("Venue not found")
    if not _can_manage_venue(store, actor, venue_id):
        raise ForbiddenError()
    return store.list_venue_bookings(venue_id, booking_date)

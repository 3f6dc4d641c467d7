"""
Slot rules for venue bookings.

Booking intervals are half-open: [start_time, end_time). Two bookings that
only touch at a boundary (10:00-12:00 and 12:00-14:00) do not overlap.
"""
from datetime import time
from decimal import Decimal

from domain import BookingStatus


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    return a_start < b_end and b_start < a_end


def blocks_slot(status: str) -> bool:
    return status in BookingStatus.ACTIVE


def find_conflict(existing, start_time: time, end_time: time, ignore_id=None):
    """
    Return the first booking in `existing` that holds an overlapping slot,
    or None. Cancelled and completed bookings never conflict.
    """
    for booking in existing:
        if ignore_id is not None and booking.id == ignore_id:
            continue
        if not blocks_slot(booking.status):
            continue
        if intervals_overlap(booking.start_time, booking.end_time, start_time, end_time):
            return booking
    return None


def billable_hours(start_time: time, end_time: time) -> int:
    # whole-hour billing on the hour component only (10:30-12:15 bills 2h)
    return end_time.hour - start_time.hour


def booking_price(hourly_price, start_time: time, end_time: time) -> Decimal:
    return Decimal(str(hourly_price)) * billable_hours(start_time, end_time)


def within_opening_hours(windows, weekday: int, start_time: time, end_time: time) -> bool:
    """
    True if [start_time, end_time) sits inside one open availability window
    for `weekday`. A venue that publishes no windows at all is bookable at
    any time; one that publishes windows is closed on days without one.
    """
    if not windows:
        return True
    for w in windows:
        if w.day_of_week != weekday or not w.is_available:
            continue
        if w.start_time <= start_time and end_time <= w.end_time:
            return True
    return False

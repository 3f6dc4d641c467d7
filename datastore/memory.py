"""
In-process implementation of the data-access contract.

Used for local development, demos and as the read fallback when the database
is unreachable. All state sits behind one re-entrant lock so every
check-then-write (slot conflict, stock reservation, stock restore) is a
single critical section. Records are copied on the way in and out.
"""
import copy
import itertools
import logging
import threading
from datetime import datetime

from datastore.base import DataStore
from domain import BookingStatus, Profile, UserRole
from services.conflicts import find_conflict
from services.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from services.inventory import ensure_available, restored_quantity
from services.notifications import BookingEvent

logger = logging.getLogger(__name__)


def _lower(value):
    return (value or "").strip().lower()


class MemoryDataStore(DataStore):
    name = "memory"

    def __init__(self, bus=None):
        self.bus = bus
        self._lock = threading.RLock()
        self._ids = {}
        self._tables = {
            "profiles": {},
            "venues": {},
            "availability": {},
            "bookings": {},
            "equipment": {},
            "rentals": {},
            "tutorials": {},
            "lessons": {},
            "progress": {},
            "notifications": {},
        }

    # ---------- helpers ----------
    def _next_id(self, table):
        counter = self._ids.setdefault(table, itertools.count(1))
        return next(counter)

    def _insert(self, table, record):
        record = copy.deepcopy(record)
        record.id = self._next_id(table)
        now = datetime.utcnow()
        for attr in ("created_at", "updated_at"):
            if hasattr(record, attr) and getattr(record, attr) is None:
                setattr(record, attr, now)
        self._tables[table][record.id] = record
        return copy.deepcopy(record)

    def _require(self, table, record_id, label):
        record = self._tables[table].get(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    def _update(self, table, record_id, label, updates):
        record = self._require(table, record_id, label)
        for key, value in updates.items():
            if key == "id" or not hasattr(record, key):
                raise ValidationError(f"Unknown field: {key}")
            setattr(record, key, value)
        if hasattr(record, "updated_at"):
            record.updated_at = datetime.utcnow()
        return copy.deepcopy(record)

    def _get(self, table, record_id):
        record = self._tables[table].get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def _rows(self, table):
        return list(self._tables[table].values())

    def _may_swap(self, record, status, expected_status=None):
        if record.status in BookingStatus.sources(status) and expected_status in (None, record.status):
            return True
        if record.status == status:
            return False
        logger.info("%s %s status change to %s rejected: now %s",
                    type(record).__name__, record.id, status, record.status)
        raise ValidationError(f"Cannot change status from {record.status} to {status}")

    def _published(self, event, booking):
        # called outside the lock so listeners may read the store
        if self.bus is not None:
            self.bus.publish_booking(event, copy.deepcopy(booking))
        return booking

    # ---------- profiles ----------
    def get_profile(self, user_id):
        with self._lock:
            return self._get("profiles", user_id)

    def get_profile_by_email(self, email):
        with self._lock:
            for p in self._rows("profiles"):
                if p.email == _lower(email):
                    return copy.deepcopy(p)
            return None

    def create_profile(self, email, role=UserRole.USER, **fields):
        with self._lock:
            if self.get_profile_by_email(email) is not None:
                raise ConflictError("Email already registered")
            profile = Profile(id=0, email=_lower(email), role=role, **fields)
            return self._insert("profiles", profile)

    def update_profile(self, user_id, updates):
        with self._lock:
            return self._update("profiles", user_id, "Profile", updates)

    def change_user_role(self, user_id, role):
        with self._lock:
            return self._update("profiles", user_id, "Profile", {"role": role})

    # ---------- venues ----------
    def list_venues(self, filters=None):
        filters = filters or {}
        with self._lock:
            venues = sorted(self._rows("venues"), key=lambda v: v.id)
        if filters.get("sport_type"):
            venues = [v for v in venues if _lower(v.sport_type) == _lower(filters["sport_type"])]
        if filters.get("location"):
            venues = [v for v in venues if _lower(filters["location"]) in _lower(v.location)]
        if filters.get("min_price") is not None:
            venues = [v for v in venues if v.hourly_price >= filters["min_price"]]
        if filters.get("max_price") is not None:
            venues = [v for v in venues if v.hourly_price <= filters["max_price"]]
        return copy.deepcopy(venues)

    def get_venue(self, venue_id):
        with self._lock:
            return self._get("venues", venue_id)

    def create_venue(self, venue):
        with self._lock:
            return self._insert("venues", venue)

    def update_venue(self, venue_id, updates):
        with self._lock:
            return self._update("venues", venue_id, "Venue", updates)

    def delete_venue(self, venue_id):
        with self._lock:
            self._require("venues", venue_id, "Venue")
            if any(b.venue_id == venue_id for b in self._rows("bookings")):
                raise ConflictError("Venue has bookings and cannot be deleted")
            for w in self._rows("availability"):
                if w.venue_id == venue_id:
                    del self._tables["availability"][w.id]
            del self._tables["venues"][venue_id]
            return True

    def list_venue_availability(self, venue_id):
        with self._lock:
            rows = [w for w in self._rows("availability") if w.venue_id == venue_id]
            rows.sort(key=lambda w: (w.day_of_week, w.start_time))
            return copy.deepcopy(rows)

    def add_venue_availability(self, window):
        with self._lock:
            self._require("venues", window.venue_id, "Venue")
            return self._insert("availability", window)

    # ---------- bookings ----------
    def _with_venue(self, booking):
        venue = self._tables["venues"].get(booking.venue_id)
        if venue is not None:
            booking.venue_details = {
                "name": venue.name,
                "location": venue.location,
                "sport_type": venue.sport_type,
                "images": list(venue.images or []),
            }
        return booking

    def create_booking(self, candidate):
        with self._lock:
            self._require("venues", candidate.venue_id, "Venue")
            same_day = [
                b for b in self._rows("bookings")
                if b.venue_id == candidate.venue_id and b.booking_date == candidate.booking_date
            ]
            clash = find_conflict(same_day, candidate.start_time, candidate.end_time)
            if clash is not None:
                logger.info(
                    "Booking rejected: venue %s %s %s-%s overlaps booking %s",
                    candidate.venue_id, candidate.booking_date,
                    candidate.start_time, candidate.end_time, clash.id,
                )
                raise ConflictError()
            booking = self._with_venue(self._insert("bookings", candidate))
        return self._published(BookingEvent.INSERT, booking)

    def get_booking(self, booking_id):
        with self._lock:
            booking = self._get("bookings", booking_id)
            return self._with_venue(booking) if booking is not None else None

    def list_user_bookings(self, user_id):
        with self._lock:
            rows = [b for b in self._rows("bookings") if b.user_id == user_id]
            rows.sort(key=lambda b: (b.booking_date, b.start_time))
            return [self._with_venue(b) for b in copy.deepcopy(rows)]

    def list_venue_bookings(self, venue_id, booking_date=None):
        with self._lock:
            rows = [
                b for b in self._rows("bookings")
                if b.venue_id == venue_id and (booking_date is None or b.booking_date == booking_date)
            ]
            rows.sort(key=lambda b: (b.booking_date, b.start_time))
            return copy.deepcopy(rows)

    def update_booking_status(self, booking_id, status, expected_status=None):
        with self._lock:
            booking = self._require("bookings", booking_id, "Booking")
            if not self._may_swap(booking, status, expected_status):
                return self._with_venue(copy.deepcopy(booking))
            updated = self._with_venue(self._update("bookings", booking_id, "Booking", {"status": status}))
        return self._published(BookingEvent.UPDATE, updated)

    def update_booking_payment(self, booking_id, payment_status, payment_id=None):
        with self._lock:
            updated = self._with_venue(self._update(
                "bookings", booking_id, "Booking",
                {"payment_status": payment_status, "payment_id": payment_id},
            ))
        return self._published(BookingEvent.UPDATE, updated)

    # ---------- equipment ----------
    def list_equipment(self, filters=None):
        filters = filters or {}
        with self._lock:
            items = sorted(self._rows("equipment"), key=lambda e: e.id)
        if filters.get("category"):
            items = [e for e in items if _lower(e.category) == _lower(filters["category"])]
        if filters.get("brand"):
            items = [e for e in items if _lower(e.brand) == _lower(filters["brand"])]
        if filters.get("min_price") is not None:
            items = [e for e in items if e.daily_price >= filters["min_price"]]
        if filters.get("max_price") is not None:
            items = [e for e in items if e.daily_price <= filters["max_price"]]
        if filters.get("only_available"):
            items = [e for e in items if e.available_quantity > 0]
        return copy.deepcopy(items)

    def get_equipment(self, equipment_id):
        with self._lock:
            return self._get("equipment", equipment_id)

    def create_equipment(self, equipment):
        with self._lock:
            return self._insert("equipment", equipment)

    def update_equipment(self, equipment_id, updates):
        if "total_quantity" in updates or "available_quantity" in updates:
            raise ValidationError("Stock levels change through resize_equipment_stock")
        with self._lock:
            return self._update("equipment", equipment_id, "Equipment", updates)

    def resize_equipment_stock(self, equipment_id, total_quantity):
        with self._lock:
            item = self._require("equipment", equipment_id, "Equipment")
            rented = item.total_quantity - item.available_quantity
            if total_quantity < rented:
                logger.info(
                    "Stock resize rejected: equipment %s has %s unit(s) rented, total %s requested",
                    equipment_id, rented, total_quantity,
                )
                raise ConflictError(f"{rented} unit(s) are currently rented")
            return self._update("equipment", equipment_id, "Equipment", {
                "total_quantity": total_quantity,
                "available_quantity": total_quantity - rented,
            })

    # ---------- rentals ----------
    def _with_equipment(self, rental):
        item = self._tables["equipment"].get(rental.equipment_id)
        if item is not None:
            rental.equipment_details = {
                "name": item.name,
                "category": item.category,
                "brand": item.brand,
                "images": list(item.images or []),
            }
        return rental

    def create_rental(self, candidate):
        with self._lock:
            item = self._require("equipment", candidate.equipment_id, "Equipment")
            try:
                ensure_available(item, candidate.quantity)
            except InsufficientStockError:
                logger.info(
                    "Rental rejected: equipment %s has %s available, %s requested",
                    item.id, item.available_quantity, candidate.quantity,
                )
                raise
            item.available_quantity -= candidate.quantity
            item.updated_at = datetime.utcnow()
            return self._with_equipment(self._insert("rentals", candidate))

    def get_rental(self, rental_id):
        with self._lock:
            rental = self._get("rentals", rental_id)
            return self._with_equipment(rental) if rental is not None else None

    def list_user_rentals(self, user_id):
        with self._lock:
            rows = [r for r in self._rows("rentals") if r.user_id == user_id]
            rows.sort(key=lambda r: (r.start_date, r.id))
            return [self._with_equipment(r) for r in copy.deepcopy(rows)]

    def update_rental_status(self, rental_id, status, expected_status=None):
        with self._lock:
            rental = self._require("rentals", rental_id, "Rental")
            if not self._may_swap(rental, status, expected_status):
                return self._with_equipment(copy.deepcopy(rental))
            if status == BookingStatus.CANCELLED:
                item = self._tables["equipment"].get(rental.equipment_id)
                if item is not None:
                    item.available_quantity = restored_quantity(item, rental.quantity)
                    item.updated_at = datetime.utcnow()
            return self._with_equipment(self._update("rentals", rental_id, "Rental", {"status": status}))

    def update_rental_payment(self, rental_id, payment_status, payment_id=None):
        with self._lock:
            return self._with_equipment(self._update(
                "rentals", rental_id, "Rental",
                {"payment_status": payment_status, "payment_id": payment_id},
            ))

    # ---------- tutorials ----------
    def list_tutorials(self, filters=None):
        filters = filters or {}
        with self._lock:
            rows = sorted(self._rows("tutorials"), key=lambda t: t.id)
        if filters.get("sport_category"):
            rows = [t for t in rows if _lower(t.sport_category) == _lower(filters["sport_category"])]
        if filters.get("difficulty"):
            rows = [t for t in rows if t.difficulty == filters["difficulty"]]
        return copy.deepcopy(rows)

    def get_tutorial(self, tutorial_id):
        with self._lock:
            return self._get("tutorials", tutorial_id)

    def create_tutorial(self, tutorial):
        with self._lock:
            return self._insert("tutorials", tutorial)

    def list_lessons(self, tutorial_id):
        with self._lock:
            rows = [l for l in self._rows("lessons") if l.tutorial_id == tutorial_id]
            rows.sort(key=lambda l: l.sequence_order)
            return copy.deepcopy(rows)

    def add_lesson(self, lesson):
        with self._lock:
            self._require("tutorials", lesson.tutorial_id, "Tutorial")
            for existing in self._rows("lessons"):
                if existing.tutorial_id == lesson.tutorial_id and existing.sequence_order == lesson.sequence_order:
                    raise ValidationError("sequence_order already used in this tutorial")
            return self._insert("lessons", lesson)

    def get_progress(self, user_id, tutorial_id):
        with self._lock:
            for p in self._rows("progress"):
                if p.user_id == user_id and p.tutorial_id == tutorial_id:
                    return copy.deepcopy(p)
            return None

    def save_progress(self, progress):
        with self._lock:
            for p in self._rows("progress"):
                if p.user_id == progress.user_id and p.tutorial_id == progress.tutorial_id:
                    saved = copy.deepcopy(progress)
                    saved.id = p.id
                    self._tables["progress"][p.id] = saved
                    return copy.deepcopy(saved)
            return self._insert("progress", progress)

    # ---------- notifications ----------
    def list_notifications(self, user_id, limit=10):
        with self._lock:
            rows = [n for n in self._rows("notifications") if n.user_id == user_id]
            rows.sort(key=lambda n: (n.created_at, n.id), reverse=True)
            return copy.deepcopy(rows[:limit])

    def get_notification(self, notification_id):
        with self._lock:
            return self._get("notifications", notification_id)

    def create_notification(self, notification):
        with self._lock:
            saved = self._insert("notifications", notification)
        if self.bus is not None:
            self.bus.publish(copy.deepcopy(saved))
        return saved

    def mark_notification_read(self, notification_id):
        with self._lock:
            self._update("notifications", notification_id, "Notification", {"is_read": True})
            return True

    def mark_all_notifications_read(self, user_id):
        with self._lock:
            changed = 0
            for n in self._rows("notifications"):
                if n.user_id == user_id and not n.is_read:
                    n.is_read = True
                    changed += 1
            return changed

    def count_unread(self, user_id):
        with self._lock:
            return sum(1 for n in self._rows("notifications") if n.user_id == user_id and not n.is_read)

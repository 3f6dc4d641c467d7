"""
SQL implementation of the data-access contract, on Flask-SQLAlchemy.

Every method is its own transaction. The booking conflict check first
bumps the venue's `booking_seq`, which takes the row lock (the write lock
on SQLite) before the day's bookings are read. Stock moves and status
changes are conditional UPDATEs checked by rowcount, so two concurrent
requests cannot both pass a check that only one of them should.
"""
import dataclasses
import logging
from datetime import datetime
from functools import wraps

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import domain
from datastore.base import DataStore
from domain import BookingStatus, UserRole
from models import db
from models.booking import Booking
from models.equipment import Equipment
from models.notification import Notification
from models.rental import Rental
from models.tutorial import Tutorial, TutorialLesson, UserTutorialProgress
from models.user import User
from models.venue import Venue, VenueAvailability
from services.conflicts import find_conflict
from services.errors import (
    BackendUnavailableError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    SportNexusError,
    ValidationError,
)
from services.notifications import BookingEvent

logger = logging.getLogger(__name__)

_VIRTUAL_FIELDS = {"id", "venue_details", "equipment_details"}


def _transaction(fn):
    """
    Make each call its own unit of work: end it with a commit so the next
    call reads committed rows, roll back on any failure, and surface driver
    errors as BackendUnavailableError.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            result = fn(*args, **kwargs)
            db.session.commit()
            return result
        except SportNexusError:
            db.session.rollback()
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Database call %s failed: %s", fn.__name__, exc)
            raise BackendUnavailableError() from exc
    return wrapper


def _to_record(row, cls):
    values = {}
    for f in dataclasses.fields(cls):
        if f.name in _VIRTUAL_FIELDS - {"id"}:
            continue
        if hasattr(row, f.name):
            values[f.name] = getattr(row, f.name)
    return cls(**values)


def _row_values(record):
    values = {}
    for f in dataclasses.fields(record):
        if f.name in _VIRTUAL_FIELDS:
            continue
        value = getattr(record, f.name)
        if f.name in ("created_at", "updated_at") and value is None:
            continue
        values[f.name] = value
    return values


def _apply(row, updates):
    for key, value in updates.items():
        if key == "id" or not hasattr(row, key):
            raise ValidationError(f"Unknown field: {key}")
        setattr(row, key, value)


def _reject_stock_fields(updates):
    if "total_quantity" in updates or "available_quantity" in updates:
        raise ValidationError("Stock levels change through resize_equipment_stock")


def _swap_status(model, row, status, expected_status=None):
    """
    Move `row` to `status` only if it still sits in a status that may lead
    there (and equals `expected_status`, when given). Returns False when the
    row already had `status`; raises ValidationError for any other mismatch.
    """
    conditions = [model.id == row.id, model.status.in_(BookingStatus.sources(status))]
    if expected_status is not None:
        conditions.append(model.status == expected_status)
    swapped = db.session.execute(
        sa.update(model)
        .where(*conditions)
        .values(status=status, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if swapped.rowcount == 1:
        return True
    # rollback expires `row`, so the check below reads the committed status
    db.session.rollback()
    if row.status == status:
        return False
    logger.info("%s %s status change to %s rejected: now %s", model.__name__, row.id, status, row.status)
    raise ValidationError(f"Cannot change status from {row.status} to {status}")


class SqlDataStore(DataStore):
    name = "sql"

    def __init__(self, bus=None):
        self.bus = bus

    # ---------- converters ----------
    def _booking(self, row):
        record = _to_record(row, domain.VenueBooking)
        if row.venue is not None:
            record.venue_details = {
                "name": row.venue.name,
                "location": row.venue.location,
                "sport_type": row.venue.sport_type,
                "images": list(row.venue.images or []),
            }
        return record

    def _rental(self, row):
        record = _to_record(row, domain.EquipmentRental)
        if row.equipment is not None:
            record.equipment_details = {
                "name": row.equipment.name,
                "category": row.equipment.category,
                "brand": row.equipment.brand,
                "images": list(row.equipment.images or []),
            }
        return record

    def _published(self, event, booking):
        if self.bus is not None:
            self.bus.publish_booking(event, booking)
        return booking

    def _require(self, model, record_id, label):
        row = db.session.get(model, record_id)
        if row is None:
            raise NotFoundError(f"{label} not found")
        return row

    # ---------- profiles ----------
    @_transaction
    def get_profile(self, user_id):
        row = db.session.get(User, user_id)
        return _to_record(row, domain.Profile) if row else None

    @_transaction
    def get_profile_by_email(self, email):
        row = User.query.filter_by(email=(email or "").strip().lower()).first()
        return _to_record(row, domain.Profile) if row else None

    @_transaction
    def create_profile(self, email, role=UserRole.USER, **fields):
        row = User(email=(email or "").strip().lower(), role=role, **fields)
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Email already registered")
        return _to_record(row, domain.Profile)

    @_transaction
    def update_profile(self, user_id, updates):
        row = self._require(User, user_id, "Profile")
        _apply(row, updates)
        db.session.commit()
        return _to_record(row, domain.Profile)

    def change_user_role(self, user_id, role):
        return self.update_profile(user_id, {"role": role})

    # ---------- venues ----------
    @_transaction
    def list_venues(self, filters=None):
        filters = filters or {}
        q = Venue.query
        if filters.get("sport_type"):
            q = q.filter(sa.func.lower(Venue.sport_type) == filters["sport_type"].strip().lower())
        if filters.get("location"):
            q = q.filter(Venue.location.ilike(f"%{filters['location']}%"))
        if filters.get("min_price") is not None:
            q = q.filter(Venue.hourly_price >= filters["min_price"])
        if filters.get("max_price") is not None:
            q = q.filter(Venue.hourly_price <= filters["max_price"])
        return [_to_record(v, domain.Venue) for v in q.order_by(Venue.id.asc()).all()]

    @_transaction
    def get_venue(self, venue_id):
        row = db.session.get(Venue, venue_id)
        return _to_record(row, domain.Venue) if row else None

    @_transaction
    def create_venue(self, venue):
        row = Venue(**_row_values(venue))
        db.session.add(row)
        db.session.commit()
        return _to_record(row, domain.Venue)

    @_transaction
    def update_venue(self, venue_id, updates):
        row = self._require(Venue, venue_id, "Venue")
        _apply(row, updates)
        db.session.commit()
        return _to_record(row, domain.Venue)

    @_transaction
    def delete_venue(self, venue_id):
        row = self._require(Venue, venue_id, "Venue")
        if Booking.query.filter_by(venue_id=venue_id).count():
            raise ConflictError("Venue has bookings and cannot be deleted")
        VenueAvailability.query.filter_by(venue_id=venue_id).delete()
        db.session.delete(row)
        db.session.commit()
        return True

    @_transaction
    def list_venue_availability(self, venue_id):
        rows = (
            VenueAvailability.query
            .filter_by(venue_id=venue_id)
            .order_by(VenueAvailability.day_of_week.asc(), VenueAvailability.start_time.asc())
            .all()
        )
        return [_to_record(w, domain.VenueAvailability) for w in rows]

    @_transaction
    def add_venue_availability(self, window):
        self._require(Venue, window.venue_id, "Venue")
        row = VenueAvailability(**_row_values(window))
        db.session.add(row)
        db.session.commit()
        return _to_record(row, domain.VenueAvailability)

    # ---------- bookings ----------
    @_transaction
    def create_booking(self, candidate):
        # write to the venue row before reading the day's bookings, so the
        # row lock (the database write lock on SQLite) is held until commit
        locked = db.session.execute(
            sa.update(Venue)
            .where(Venue.id == candidate.venue_id)
            .values(booking_seq=Venue.booking_seq + 1, updated_at=Venue.updated_at)
            .execution_options(synchronize_session=False)
        )
        if locked.rowcount != 1:
            raise NotFoundError("Venue not found")

        same_day = (
            Booking.query
            .filter(
                Booking.venue_id == candidate.venue_id,
                Booking.booking_date == candidate.booking_date,
                Booking.status.in_(BookingStatus.ACTIVE),
            )
            .all()
        )
        clash = find_conflict(same_day, candidate.start_time, candidate.end_time)
        if clash is not None:
            logger.info(
                "Booking rejected: venue %s %s %s-%s overlaps booking %s",
                candidate.venue_id, candidate.booking_date,
                candidate.start_time, candidate.end_time, clash.id,
            )
            raise ConflictError()

        row = Booking(**_row_values(candidate))
        db.session.add(row)
        db.session.commit()
        return self._published(BookingEvent.INSERT, self._booking(row))

    @_transaction
    def get_booking(self, booking_id):
        row = db.session.get(Booking, booking_id)
        return self._booking(row) if row else None

    @_transaction
    def list_user_bookings(self, user_id):
        rows = (
            Booking.query
            .filter_by(user_id=user_id)
            .order_by(Booking.booking_date.asc(), Booking.start_time.asc())
            .all()
        )
        return [self._booking(b) for b in rows]

    @_transaction
    def list_venue_bookings(self, venue_id, booking_date=None):
        q = Booking.query.filter_by(venue_id=venue_id)
        if booking_date is not None:
            q = q.filter_by(booking_date=booking_date)
        rows = q.order_by(Booking.booking_date.asc(), Booking.start_time.asc()).all()
        return [_to_record(b, domain.VenueBooking) for b in rows]

    @_transaction
    def update_booking_status(self, booking_id, status, expected_status=None):
        row = self._require(Booking, booking_id, "Booking")
        if not _swap_status(Booking, row, status, expected_status):
            return self._booking(row)
        db.session.commit()
        return self._published(BookingEvent.UPDATE, self._booking(row))

    @_transaction
    def update_booking_payment(self, booking_id, payment_status, payment_id=None):
        row = self._require(Booking, booking_id, "Booking")
        row.payment_status = payment_status
        row.payment_id = payment_id
        db.session.commit()
        return self._published(BookingEvent.UPDATE, self._booking(row))

    # ---------- equipment ----------
    @_transaction
    def list_equipment(self, filters=None):
        filters = filters or {}
        q = Equipment.query
        if filters.get("category"):
            q = q.filter(sa.func.lower(Equipment.category) == filters["category"].strip().lower())
        if filters.get("brand"):
            q = q.filter(sa.func.lower(Equipment.brand) == filters["brand"].strip().lower())
        if filters.get("min_price") is not None:
            q = q.filter(Equipment.daily_price >= filters["min_price"])
        if filters.get("max_price") is not None:
            q = q.filter(Equipment.daily_price <= filters["max_price"])
        if filters.get("only_available"):
            q = q.filter(Equipment.available_quantity > 0)
        return [_to_record(e, domain.Equipment) for e in q.order_by(Equipment.id.asc()).all()]

    @_transaction
    def get_equipment(self, equipment_id):
        row = db.session.get(Equipment, equipment_id)
        return _to_record(row, domain.Equipment) if row else None

    @_transaction
    def create_equipment(self, equipment):
        row = Equipment(**_row_values(equipment))
        db.session.add(row)
        db.session.commit()
        return _to_record(row, domain.Equipment)

    @_transaction
    def update_equipment(self, equipment_id, updates):
        _reject_stock_fields(updates)
        row = self._require(Equipment, equipment_id, "Equipment")
        _apply(row, updates)
        db.session.commit()
        return _to_record(row, domain.Equipment)

    @_transaction
    def resize_equipment_stock(self, equipment_id, total_quantity):
        # SET expressions read the pre-update row, so units out on rental
        # stay out whatever committed since the caller last looked
        resized = db.session.execute(
            sa.update(Equipment)
            .where(
                Equipment.id == equipment_id,
                Equipment.total_quantity - Equipment.available_quantity <= total_quantity,
            )
            .values(
                available_quantity=Equipment.available_quantity + (total_quantity - Equipment.total_quantity),
                total_quantity=total_quantity,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        row = db.session.get(Equipment, equipment_id, populate_existing=True)
        if row is None:
            raise NotFoundError("Equipment not found")
        if resized.rowcount != 1:
            rented = row.total_quantity - row.available_quantity
            logger.info(
                "Stock resize rejected: equipment %s has %s unit(s) rented, total %s requested",
                equipment_id, rented, total_quantity,
            )
            raise ConflictError(f"{rented} unit(s) are currently rented")
        db.session.commit()
        return _to_record(row, domain.Equipment)

    # ---------- rentals ----------
    @_transaction
    def create_rental(self, candidate):
        reserved = db.session.execute(
            sa.update(Equipment)
            .where(
                Equipment.id == candidate.equipment_id,
                Equipment.available_quantity >= candidate.quantity,
            )
            .values(
                available_quantity=Equipment.available_quantity - candidate.quantity,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if reserved.rowcount != 1:
            item = self._require(Equipment, candidate.equipment_id, "Equipment")
            logger.info(
                "Rental rejected: equipment %s has %s available, %s requested",
                item.id, item.available_quantity, candidate.quantity,
            )
            raise InsufficientStockError(
                f"Only {item.available_quantity} unit(s) of {item.name} available"
            )

        row = Rental(**_row_values(candidate))
        db.session.add(row)
        db.session.commit()
        return self._rental(row)

    @_transaction
    def get_rental(self, rental_id):
        row = db.session.get(Rental, rental_id)
        return self._rental(row) if row else None

    @_transaction
    def list_user_rentals(self, user_id):
        rows = (
            Rental.query
            .filter_by(user_id=user_id)
            .order_by(Rental.start_date.asc(), Rental.id.asc())
            .all()
        )
        return [self._rental(r) for r in rows]

    @_transaction
    def update_rental_status(self, rental_id, status, expected_status=None):
        row = self._require(Rental, rental_id, "Rental")
        if not _swap_status(Rental, row, status, expected_status):
            return self._rental(row)
        if status == BookingStatus.CANCELLED:
            # only the request whose swap matched gives units back
            restored = Equipment.available_quantity + row.quantity
            db.session.execute(
                sa.update(Equipment)
                .where(Equipment.id == row.equipment_id)
                .values(
                    available_quantity=sa.case(
                        (restored > Equipment.total_quantity, Equipment.total_quantity),
                        else_=restored,
                    ),
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
        db.session.commit()
        return self._rental(row)

    @_transaction
    def update_rental_payment(self, rental_id, payment_status, payment_id=None):
        row = self._require(Rental, rental_id, "Rental")
        row.payment_status = payment_status
        row.payment_id = payment_id
        db.session.commit()
        return self._rental(row)

    # ---------- tutorials ----------
    @_transaction
    def list_tutorials(self, filters=None):
        filters = filters or {}
        q = Tutorial.query
        if filters.get("sport_category"):
            q = q.filter(sa.func.lower(Tutorial.sport_category) == filters["sport_category"].strip().lower())
        if filters.get("difficulty"):
            q = q.filter(Tutorial.difficulty == filters["difficulty"])
        return [_to_record(t, domain.Tutorial) for t in q.order_by(Tutorial.id.asc()).all()]

    @_transaction
    def get_tutorial(self, tutorial_id):
        row = db.session.get(Tutorial, tutorial_id)
        return _to_record(row, domain.Tutorial) if row else None

    @_transaction
    def create_tutorial(self, tutorial):
        row = Tutorial(**_row_values(tutorial))
        db.session.add(row)
        db.session.commit()
        return _to_record(row, domain.Tutorial)

    @_transaction
    def list_lessons(self, tutorial_id):
        rows = (
            TutorialLesson.query
            .filter_by(tutorial_id=tutorial_id)
            .order_by(TutorialLesson.sequence_order.asc())
            .all()
        )
        return [_to_record(l, domain.TutorialLesson) for l in rows]

    @_transaction
    def add_lesson(self, lesson):
        self._require(Tutorial, lesson.tutorial_id, "Tutorial")
        row = TutorialLesson(**_row_values(lesson))
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError("sequence_order already used in this tutorial")
        return _to_record(row, domain.TutorialLesson)

    @_transaction
    def get_progress(self, user_id, tutorial_id):
        row = UserTutorialProgress.query.filter_by(user_id=user_id, tutorial_id=tutorial_id).first()
        return _to_record(row, domain.UserTutorialProgress) if row else None

    @_transaction
    def save_progress(self, progress):
        values = _row_values(progress)
        row = UserTutorialProgress.query.filter_by(
            user_id=progress.user_id, tutorial_id=progress.tutorial_id
        ).first()
        if row is None:
            row = UserTutorialProgress(**values)
            db.session.add(row)
            try:
                db.session.commit()
                return _to_record(row, domain.UserTutorialProgress)
            except IntegrityError:
                # lost the insert race for this (user, tutorial); update instead
                db.session.rollback()
                row = UserTutorialProgress.query.filter_by(
                    user_id=progress.user_id, tutorial_id=progress.tutorial_id
                ).one()
        _apply(row, values)
        db.session.commit()
        return _to_record(row, domain.UserTutorialProgress)

    # ---------- notifications ----------
    @_transaction
    def list_notifications(self, user_id, limit=10):
        rows = (
            Notification.query
            .filter_by(user_id=user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )
        return [_to_record(n, domain.Notification) for n in rows]

    @_transaction
    def get_notification(self, notification_id):
        row = db.session.get(Notification, notification_id)
        return _to_record(row, domain.Notification) if row else None

    @_transaction
    def create_notification(self, notification):
        row = Notification(**_row_values(notification))
        db.session.add(row)
        db.session.commit()
        saved = _to_record(row, domain.Notification)
        if self.bus is not None:
            self.bus.publish(saved)
        return saved

    @_transaction
    def mark_notification_read(self, notification_id):
        row = self._require(Notification, notification_id, "Notification")
        row.is_read = True
        db.session.commit()
        return True

    @_transaction
    def mark_all_notifications_read(self, user_id):
        result = db.session.execute(
            sa.update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount

    @_transaction
    def count_unread(self, user_id):
        return Notification.query.filter_by(user_id=user_id, is_read=False).count()

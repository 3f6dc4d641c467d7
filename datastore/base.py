"""
The data-access contract.

Every backing store (SQL database, in-memory) implements the full method set
below and returns `domain` records. Failures are raised as the exceptions in
`services.errors`; nothing here returns None to signal an error, except the
`get_*` lookups which return None for a missing row.
"""
from abc import ABC, abstractmethod


class DataStore(ABC):
    name = "abstract"

    # ---------- profiles ----------
    @abstractmethod
    def get_profile(self, user_id): ...

    @abstractmethod
    def get_profile_by_email(self, email): ...

    @abstractmethod
    def create_profile(self, email, role="user", **fields): ...

    @abstractmethod
    def update_profile(self, user_id, updates: dict): ...

    @abstractmethod
    def change_user_role(self, user_id, role): ...

    # ---------- venues ----------
    @abstractmethod
    def list_venues(self, filters=None): ...

    @abstractmethod
    def get_venue(self, venue_id): ...

    @abstractmethod
    def create_venue(self, venue): ...

    @abstractmethod
    def update_venue(self, venue_id, updates: dict): ...

    @abstractmethod
    def delete_venue(self, venue_id): ...

    @abstractmethod
    def list_venue_availability(self, venue_id): ...

    @abstractmethod
    def add_venue_availability(self, window): ...

    # ---------- bookings ----------
    @abstractmethod
    def create_booking(self, candidate):
        """
        Insert `candidate` unless an active booking on the same venue and date
        overlaps it. The conflict check and the insert form one unit of work;
        raises ConflictError without writing anything on overlap. Booking
        inserts and updates are published to the bus's venue topic, if a bus
        is attached.
        """

    @abstractmethod
    def get_booking(self, booking_id): ...

    @abstractmethod
    def list_user_bookings(self, user_id): ...

    @abstractmethod
    def list_venue_bookings(self, venue_id, booking_date=None): ...

    @abstractmethod
    def update_booking_status(self, booking_id, status, expected_status=None):
        """
        Conditional write: applies only while the booking sits in a status
        that may move to `status` (and equals `expected_status`, if given).
        Returns the booking unchanged when it already has `status`; raises
        ValidationError for any other mismatch.
        """

    @abstractmethod
    def update_booking_payment(self, booking_id, payment_status, payment_id=None): ...

    # ---------- equipment ----------
    @abstractmethod
    def list_equipment(self, filters=None): ...

    @abstractmethod
    def get_equipment(self, equipment_id): ...

    @abstractmethod
    def create_equipment(self, equipment): ...

    @abstractmethod
    def update_equipment(self, equipment_id, updates: dict):
        """Descriptive fields only; stock levels go through resize_equipment_stock."""

    @abstractmethod
    def resize_equipment_stock(self, equipment_id, total_quantity):
        """
        Set the total stock in one step, moving `available_quantity` by the
        same delta. Raises ConflictError when fewer units than are currently
        rented out are requested.
        """

    # ---------- rentals ----------
    @abstractmethod
    def create_rental(self, candidate):
        """
        Reserve `candidate.quantity` units and insert the rental as one unit
        of work. Raises InsufficientStockError, writing nothing, when fewer
        units are available.
        """

    @abstractmethod
    def get_rental(self, rental_id): ...

    @abstractmethod
    def list_user_rentals(self, user_id): ...

    @abstractmethod
    def update_rental_status(self, rental_id, status, expected_status=None):
        """
        Same conditional write as update_booking_status. Only the call that
        actually moves an active rental to cancelled gives its units back.
        """

    @abstractmethod
    def update_rental_payment(self, rental_id, payment_status, payment_id=None): ...

    # ---------- tutorials ----------
    @abstractmethod
    def list_tutorials(self, filters=None): ...

    @abstractmethod
    def get_tutorial(self, tutorial_id): ...

    @abstractmethod
    def create_tutorial(self, tutorial): ...

    @abstractmethod
    def list_lessons(self, tutorial_id): ...

    @abstractmethod
    def add_lesson(self, lesson): ...

    @abstractmethod
    def get_progress(self, user_id, tutorial_id): ...

    @abstractmethod
    def save_progress(self, progress):
        """Upsert keyed on (user_id, tutorial_id)."""

    # ---------- notifications ----------
    @abstractmethod
    def list_notifications(self, user_id, limit=10): ...

    @abstractmethod
    def get_notification(self, notification_id): ...

    @abstractmethod
    def create_notification(self, notification):
        """Insert and publish to the notification bus, if one is attached."""

    @abstractmethod
    def mark_notification_read(self, notification_id): ...

    @abstractmethod
    def mark_all_notifications_read(self, user_id): ...

    @abstractmethod
    def count_unread(self, user_id): ...

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from domain import BookingStatus, EquipmentRental, PaymentStatus, UserRole
from services.bookings import ensure_transition
from services.errors import AuthRequiredError, ForbiddenError, NotFoundError, ValidationError
from services.inventory import ensure_available, rental_price, validate_rental_request
from services.notifications import notify

logger = logging.getLogger(__name__)


def check_and_create_rental(store, user_id, equipment_id, start_date, end_date, quantity,
                            total_price=None, notes=None, today=None):
    """
    Reserve `quantity` units of an equipment item and create a pending rental.

    `total_price`, when a client sends one, must match the server-side price;
    it is never trusted on its own.
    """
    if user_id is None:
        raise AuthRequiredError()
    validate_rental_request(start_date, end_date, quantity)
    if start_date < (today or date.today()):
        raise ValidationError("start_date is in the past")

    item = store.get_equipment(equipment_id)
    if item is None:
        raise NotFoundError("Equipment not found")
    # early, friendly rejection; the store re-checks atomically
    ensure_available(item, quantity)

    price = rental_price(item, start_date, end_date, quantity)
    if total_price is not None:
        try:
            quoted = Decimal(str(total_price))
        except InvalidOperation:
            raise ValidationError("total_price must be a number")
        if quoted != price:
            raise ValidationError(f"total_price does not match the rental price ({price})")

    rental = store.create_rental(EquipmentRental(
        equipment_id=item.id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        quantity=quantity,
        total_price=price,
        status=BookingStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        notes=notes,
    ))
    logger.info("Rental %s created: %s x equipment %s for user %s", rental.id, quantity, item.id, user_id)
    return rental


def quote_rental(store, equipment_id, start_date, end_date, quantity):
    validate_rental_request(start_date, end_date, quantity)
    item = store.get_equipment(equipment_id)
    if item is None:
        raise NotFoundError("Equipment not found")
    return rental_price(item, start_date, end_date, quantity)


def change_rental_status(store, rental_id, status, actor):
    if actor is None:
        raise AuthRequiredError()
    rental = store.get_rental(rental_id)
    if rental is None:
        raise NotFoundError("Rental not found")

    is_customer = rental.user_id == actor.id
    is_manager = actor.role == UserRole.ADMIN
    if not is_manager:
        item = store.get_equipment(rental.equipment_id)
        is_manager = item is not None and item.owner_id == actor.id
    if not is_manager and not (is_customer and status == BookingStatus.CANCELLED):
        if not is_customer:
            raise NotFoundError("Rental not found")
        raise ForbiddenError("Only the equipment owner can change this rental")

    if not ensure_transition(rental.status, status):
        return rental

    updated = store.update_rental_status(rental_id, status, expected_status=rental.status)
    name = (updated.equipment_details or {}).get("name", "equipment")
    notify(
        store,
        updated.user_id,
        f"Rental {status}",
        f"Your rental of {updated.quantity} x {name} "
        f"({updated.start_date.isoformat()} to {updated.end_date.isoformat()}) is now {status}",
        type="rental",
        entity_type="equipment_rental",
        entity_id=updated.id,
    )
    return updated


def cancel_rental(store, rental_id, actor):
    return change_rental_status(store, rental_id, BookingStatus.CANCELLED, actor)

"""
Simulated payment gateway. No money moves; a successful charge just yields a
`pay_<hex>` reference that is stored on the booking or rental. Payment state
is independent of the booking/rental status.
"""
import logging
import secrets
from decimal import Decimal

from domain import BookingStatus, PaymentStatus, UserRole
from services.errors import AuthRequiredError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def process_mock_payment(amount):
    if Decimal(str(amount)) <= 0:
        return PaymentStatus.FAILED, None
    return PaymentStatus.PAID, f"pay_{secrets.token_hex(8)}"


def _pay(record, kind, actor, update_payment):
    if actor is None:
        raise AuthRequiredError()
    if record is None or record.user_id != actor.id:
        raise NotFoundError(f"{kind.capitalize()} not found")
    if record.status == BookingStatus.CANCELLED:
        raise ValidationError(f"Cannot pay for a cancelled {kind}")
    if record.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
        raise ValidationError(f"{kind.capitalize()} already {record.payment_status}")

    status, payment_id = process_mock_payment(record.total_price)
    logger.info("Mock payment for %s %s: %s", kind, record.id, status)
    return update_payment(record.id, status, payment_id)


def _refund(record, kind, actor, update_payment):
    if actor is None:
        raise AuthRequiredError()
    if record is None:
        raise NotFoundError(f"{kind.capitalize()} not found")
    if actor.role != UserRole.ADMIN:
        raise ForbiddenError()
    if record.payment_status != PaymentStatus.PAID:
        raise ValidationError(f"Only paid {kind}s can be refunded")
    return update_payment(record.id, PaymentStatus.REFUNDED, record.payment_id)


def pay_booking(store, booking_id, actor):
    return _pay(store.get_booking(booking_id), "booking", actor, store.update_booking_payment)


def pay_rental(store, rental_id, actor):
    return _pay(store.get_rental(rental_id), "rental", actor, store.update_rental_payment)


def refund_booking(store, booking_id, actor):
    return _refund(store.get_booking(booking_id), "booking", actor, store.update_booking_payment)


def refund_rental(store, rental_id, actor):
    return _refund(store.get_rental(rental_id), "rental", actor, store.update_rental_payment)

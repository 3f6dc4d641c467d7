from datetime import date, time
from decimal import Decimal

import pytest

from domain import BookingStatus, PaymentStatus, UserRole
from services import bookings, payments, rentals
from services.errors import ForbiddenError, NotFoundError, ValidationError

TODAY = date(2023, 8, 1)


@pytest.fixture
def booking(store, venue, player):
    return bookings.check_and_create_booking(
        store, player.id, venue.id, date(2023, 9, 1), time(14), time(16), today=TODAY
    )


@pytest.fixture
def admin(store):
    return store.create_profile("admin@example.com", role=UserRole.ADMIN)


def test_mock_gateway():
    status, ref = payments.process_mock_payment(Decimal("60"))
    assert status == PaymentStatus.PAID
    assert ref.startswith("pay_")
    assert payments.process_mock_payment(0) == (PaymentStatus.FAILED, None)


def test_pay_booking_leaves_status_alone(store, booking, player):
    paid = payments.pay_booking(store, booking.id, player)
    assert paid.payment_status == PaymentStatus.PAID
    assert paid.payment_id.startswith("pay_")
    assert paid.status == BookingStatus.PENDING

    with pytest.raises(ValidationError):
        payments.pay_booking(store, booking.id, player)


def test_only_the_customer_pays(store, booking, other_player):
    with pytest.raises(NotFoundError):
        payments.pay_booking(store, booking.id, other_player)


def test_cancelled_booking_cannot_be_paid(store, booking, player):
    bookings.cancel_booking(store, booking.id, player)
    with pytest.raises(ValidationError):
        payments.pay_booking(store, booking.id, player)


def test_refund(store, booking, player, admin):
    with pytest.raises(ValidationError):
        payments.refund_booking(store, booking.id, admin)

    paid = payments.pay_booking(store, booking.id, player)
    with pytest.raises(ForbiddenError):
        payments.refund_booking(store, booking.id, player)

    refunded = payments.refund_booking(store, booking.id, admin)
    assert refunded.payment_status == PaymentStatus.REFUNDED
    assert refunded.payment_id == paid.payment_id


def test_pay_and_refund_rental(store, equipment, player, admin):
    rental = rentals.check_and_create_rental(
        store, player.id, equipment.id, date(2023, 9, 1), date(2023, 9, 1), 1, today=TODAY
    )
    paid = payments.pay_rental(store, rental.id, player)
    assert paid.payment_status == PaymentStatus.PAID
    assert payments.refund_rental(store, rental.id, admin).payment_status == PaymentStatus.REFUNDED

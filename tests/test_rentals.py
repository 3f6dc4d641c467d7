from datetime import date
from decimal import Decimal

import pytest

from domain import BookingStatus, Equipment, EquipmentRental
from services import rentals
from services.errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from services.inventory import rental_days, rental_price, restored_quantity, unit_price

TODAY = date(2023, 8, 1)
START = date(2023, 9, 1)


def _item(monthly=Decimal("800"), total=3, available=None, owner_id=1):
    return Equipment(
        owner_id=owner_id, name="Road Bike", category="cycling", brand="Trek",
        daily_price=Decimal("45"), weekly_price=Decimal("250"), monthly_price=monthly,
        total_quantity=total, available_quantity=total if available is None else available,
    )


def _rent(store, user, item, quantity=1, start=START, end=START, **kwargs):
    return rentals.check_and_create_rental(
        store, user.id, item.id, start, end, quantity, today=TODAY, **kwargs
    )


# ---------- pricing ----------
def test_rental_days_are_inclusive():
    assert rental_days(START, START) == 1
    assert rental_days(date(2023, 9, 1), date(2023, 9, 7)) == 7


@pytest.mark.parametrize("days,expected", [
    (1, "45"),
    (7, "250"),
    (10, "385"),
    (30, "800"),
    (40, "1185"),
])
def test_unit_price_uses_largest_tiers_first(days, expected):
    assert unit_price(_item(), days) == Decimal(expected)


def test_no_monthly_price_bills_in_weeks():
    assert unit_price(_item(monthly=None), 30) == Decimal("1090")


def test_total_scales_with_quantity():
    assert rental_price(_item(), date(2023, 9, 1), date(2023, 9, 3), 2) == Decimal("270")


def test_restore_never_exceeds_total():
    assert restored_quantity(_item(total=3, available=2), 2) == 3
    assert restored_quantity(_item(total=3, available=0), 2) == 2


# ---------- ledger ----------
def test_rental_reserves_units(store, equipment, player):
    rental = _rent(store, player, equipment, quantity=2, end=date(2023, 9, 2))
    assert rental.status == BookingStatus.PENDING
    assert rental.total_price == Decimal("180")
    assert rental.equipment_details["name"] == "Road Bike"
    assert store.get_equipment(equipment.id).available_quantity == 1


def test_insufficient_stock_writes_nothing(store, equipment, player):
    with pytest.raises(InsufficientStockError):
        _rent(store, player, equipment, quantity=4)
    assert store.get_equipment(equipment.id).available_quantity == 3
    assert store.list_user_rentals(player.id) == []


def test_store_rechecks_stock_atomically(store, equipment, player, other_player):
    # both callers saw 3 available; the second reservation must still fail
    first = EquipmentRental(
        equipment_id=equipment.id, user_id=player.id, start_date=START, end_date=START,
        quantity=2, total_price=Decimal("90"),
    )
    second = EquipmentRental(
        equipment_id=equipment.id, user_id=other_player.id, start_date=START, end_date=START,
        quantity=2, total_price=Decimal("90"),
    )
    store.create_rental(first)
    with pytest.raises(InsufficientStockError):
        store.create_rental(second)
    assert store.get_equipment(equipment.id).available_quantity == 1


def test_cancel_restores_stock_once(store, equipment, player):
    rental = _rent(store, player, equipment, quantity=2)
    rentals.cancel_rental(store, rental.id, player)
    assert store.get_equipment(equipment.id).available_quantity == 3

    # a second cancel is a no-op and must not add units again
    again = rentals.cancel_rental(store, rental.id, player)
    assert again.status == BookingStatus.CANCELLED
    store.update_rental_status(rental.id, BookingStatus.CANCELLED)
    assert store.get_equipment(equipment.id).available_quantity == 3


def test_completed_rental_keeps_units_out(store, equipment, owner, player):
    rental = _rent(store, player, equipment)
    rentals.change_rental_status(store, rental.id, BookingStatus.CONFIRMED, owner)
    rentals.change_rental_status(store, rental.id, BookingStatus.COMPLETED, owner)
    assert store.get_equipment(equipment.id).available_quantity == 2
    with pytest.raises(ValidationError):
        rentals.cancel_rental(store, rental.id, player)


def test_client_total_must_match(store, equipment, player):
    with pytest.raises(ValidationError):
        _rent(store, player, equipment, total_price="1.00")
    assert _rent(store, player, equipment, total_price="45").total_price == Decimal("45")


@pytest.mark.parametrize("quantity", [0, -1, True, "2"])
def test_quantity_must_be_positive_integer(store, equipment, player, quantity):
    with pytest.raises(ValidationError):
        _rent(store, player, equipment, quantity=quantity)


def test_dates_validated(store, equipment, player):
    with pytest.raises(ValidationError):
        _rent(store, player, equipment, start=date(2023, 9, 5), end=date(2023, 9, 1))
    with pytest.raises(ValidationError):
        _rent(store, player, equipment, start=date(2023, 7, 1), end=date(2023, 7, 2))


def test_unknown_equipment(store, player):
    with pytest.raises(NotFoundError):
        rentals.check_and_create_rental(store, player.id, 404, START, START, 1, today=TODAY)


def test_status_change_notifies_renter(store, equipment, owner, player):
    rental = _rent(store, player, equipment)
    rentals.change_rental_status(store, rental.id, BookingStatus.CONFIRMED, owner)
    [note] = store.list_notifications(player.id)
    assert note.title == "Rental confirmed"
    assert note.type == "rental"


def test_cancel_cannot_reopen_a_completed_rental(store, equipment, owner, player):
    rental = _rent(store, player, equipment)
    rentals.change_rental_status(store, rental.id, BookingStatus.CONFIRMED, owner)
    rentals.change_rental_status(store, rental.id, BookingStatus.COMPLETED, owner)

    with pytest.raises(ValidationError):
        store.update_rental_status(rental.id, BookingStatus.CANCELLED)
    assert store.get_rental(rental.id).status == BookingStatus.COMPLETED
    assert store.get_equipment(equipment.id).available_quantity == 2


def test_complete_loses_to_a_cancel_that_lands_first(store, equipment, owner, player, monkeypatch):
    rental = _rent(store, player, equipment)
    rentals.change_rental_status(store, rental.id, BookingStatus.CONFIRMED, owner)
    read = store.get_rental

    def read_then_cancel(rental_id):
        snapshot = read(rental_id)
        store.update_rental_status(rental_id, BookingStatus.CANCELLED)
        return snapshot

    monkeypatch.setattr(store, "get_rental", read_then_cancel)
    with pytest.raises(ValidationError):
        rentals.change_rental_status(store, rental.id, BookingStatus.COMPLETED, owner)
    monkeypatch.undo()

    assert store.get_rental(rental.id).status == BookingStatus.CANCELLED
    # the cancel gave the unit back exactly once
    assert store.get_equipment(equipment.id).available_quantity == 3


# ---------- stock edits ----------
def test_resize_counts_rentals_made_after_the_item_was_read(store, equipment, player):
    stale = store.get_equipment(equipment.id)
    assert stale.available_quantity == 3
    _rent(store, player, equipment, quantity=2)

    resized = store.resize_equipment_stock(stale.id, 4)
    assert resized.total_quantity == 4
    assert resized.available_quantity == 2


def test_resize_below_rented_units_is_refused(store, equipment, player):
    _rent(store, player, equipment, quantity=2)
    with pytest.raises(ConflictError) as exc:
        store.resize_equipment_stock(equipment.id, 1)
    assert exc.value.message == "2 unit(s) are currently rented"

    item = store.get_equipment(equipment.id)
    assert (item.total_quantity, item.available_quantity) == (3, 1)
    shrunk = store.resize_equipment_stock(equipment.id, 2)
    assert (shrunk.total_quantity, shrunk.available_quantity) == (2, 0)


def test_resize_unknown_equipment(store):
    with pytest.raises(NotFoundError):
        store.resize_equipment_stock(404, 2)


def test_stock_levels_are_not_plain_fields(store, equipment):
    with pytest.raises(ValidationError):
        store.update_equipment(equipment.id, {"available_quantity": 9})
    with pytest.raises(ValidationError):
        store.update_equipment(equipment.id, {"total_quantity": 9})
    renamed = store.update_equipment(equipment.id, {"name": "Gravel Bike"})
    assert renamed.name == "Gravel Bike"
    assert renamed.available_quantity == 3

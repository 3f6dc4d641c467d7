"""
Availability ledger rules for equipment rentals.

The authoritative count is Equipment.available_quantity. Units are taken
when a rental is created and given back when it is cancelled; the datastore
applies both changes in the same unit of work as the rental row itself.
"""
from datetime import date
from decimal import Decimal

from services.errors import InsufficientStockError, ValidationError

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30


def rental_days(start_date: date, end_date: date) -> int:
    # inclusive: a same-day rental is one day
    return (end_date - start_date).days + 1


def unit_price(equipment, days: int) -> Decimal:
    """
    Price of one unit for `days` days, billed in the largest tiers first:
    30-day months (when the item has a monthly price), then weeks, then days.
    """
    daily = Decimal(str(equipment.daily_price))
    weekly = Decimal(str(equipment.weekly_price))
    total = Decimal("0")
    remaining = days

    if equipment.monthly_price is not None:
        months, remaining = divmod(remaining, DAYS_PER_MONTH)
        total += Decimal(str(equipment.monthly_price)) * months

    weeks, remaining = divmod(remaining, DAYS_PER_WEEK)
    total += weekly * weeks
    total += daily * remaining
    return total


def rental_price(equipment, start_date: date, end_date: date, quantity: int) -> Decimal:
    return unit_price(equipment, rental_days(start_date, end_date)) * quantity


def validate_rental_request(start_date: date, end_date: date, quantity) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError("quantity must be a positive integer")
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")


def ensure_available(equipment, quantity: int) -> None:
    if equipment.available_quantity < quantity:
        raise InsufficientStockError(
            f"Only {equipment.available_quantity} unit(s) of {equipment.name} available"
        )


def restored_quantity(equipment, quantity: int) -> int:
    return min(equipment.total_quantity, equipment.available_quantity + quantity)

from datetime import time
from decimal import Decimal

import pytest

from datastore import FallbackDataStore, MemoryDataStore, seed
from datastore.base import DataStore
from domain import Equipment, UserRole, Venue, VenueAvailability
from services.errors import BackendUnavailableError, ConflictError, NotFoundError, ValidationError


def test_both_backends_implement_the_contract(store):
    assert isinstance(store, DataStore)
    assert store.name in ("sql", "memory")


# ---------- profiles ----------
def test_profiles(store):
    created = store.create_profile("  Mixed@Example.com ", full_name="Mixed Case")
    assert created.email == "mixed@example.com"
    assert created.role == UserRole.USER
    assert store.get_profile_by_email("MIXED@example.com").id == created.id

    updated = store.update_profile(created.id, {"phone": "555-0100"})
    assert updated.phone == "555-0100"
    assert store.change_user_role(created.id, UserRole.VENUE_OWNER).role == UserRole.VENUE_OWNER

    with pytest.raises(ConflictError):
        store.create_profile("mixed@example.com")
    with pytest.raises(ValidationError):
        store.update_profile(created.id, {"not_a_column": 1})
    with pytest.raises(NotFoundError):
        store.update_profile(9999, {"phone": "1"})
    assert store.get_profile(9999) is None


# ---------- venues ----------
def test_venue_filters(store, owner):
    for name, sport, location, price in [
        ("A", "Tennis", "Downtown Sports Center", "25"),
        ("B", "Swimming", "City Sports Complex", "15"),
        ("C", "Tennis", "Westside", "40"),
    ]:
        store.create_venue(Venue(
            owner_id=owner.id, name=name, location=location, address="-",
            sport_type=sport, hourly_price=Decimal(price),
        ))

    assert [v.name for v in store.list_venues()] == ["A", "B", "C"]
    assert [v.name for v in store.list_venues({"sport_type": "tennis"})] == ["A", "C"]
    assert [v.name for v in store.list_venues({"location": "sports"})] == ["A", "B"]
    assert [v.name for v in store.list_venues({"min_price": Decimal("20"), "max_price": Decimal("30")})] == ["A"]


def test_venue_update_and_delete(store, venue):
    assert store.update_venue(venue.id, {"capacity": 10}).capacity == 10
    store.add_venue_availability(VenueAvailability(
        venue_id=venue.id, day_of_week=0, start_time=time(9), end_time=time(17),
    ))
    assert store.delete_venue(venue.id) is True
    assert store.get_venue(venue.id) is None
    assert store.list_venue_availability(venue.id) == []
    with pytest.raises(NotFoundError):
        store.delete_venue(venue.id)


def test_availability_ordering(store, venue):
    for day, start in [(3, 14), (1, 9), (3, 8)]:
        store.add_venue_availability(VenueAvailability(
            venue_id=venue.id, day_of_week=day, start_time=time(start), end_time=time(start + 2),
        ))
    windows = store.list_venue_availability(venue.id)
    assert [(w.day_of_week, w.start_time.hour) for w in windows] == [(1, 9), (3, 8), (3, 14)]


# ---------- equipment ----------
def test_equipment_filters(store, equipment, owner):
    store.create_equipment(Equipment(
        owner_id=owner.id, name="Tennis Racket", category="racket", brand="Wilson",
        daily_price=Decimal("12"), weekly_price=Decimal("60"), total_quantity=1, available_quantity=0,
    ))
    assert [e.name for e in store.list_equipment({"category": "CYCLING"})] == ["Road Bike"]
    assert [e.name for e in store.list_equipment({"brand": "wilson"})] == ["Tennis Racket"]
    assert [e.name for e in store.list_equipment({"only_available": True})] == ["Road Bike"]
    assert [e.name for e in store.list_equipment({"max_price": Decimal("20")})] == ["Tennis Racket"]


# ---------- seed + fallback ----------
def test_seed_is_idempotent():
    store = MemoryDataStore()
    owner = seed(store)
    seed(store)
    assert owner.role == UserRole.ADMIN
    assert len(store.list_venues()) == 4
    assert len(store.list_equipment()) == 3
    assert len(store.list_tutorials()) == 2
    assert len(store.list_venue_availability(store.list_venues()[0].id)) == 7


class _DownStore(MemoryDataStore):
    name = "down"

    def list_venues(self, filters=None):
        raise BackendUnavailableError()

    def create_venue(self, venue):
        raise BackendUnavailableError()


def test_fallback_serves_catalogue_reads():
    fallback = MemoryDataStore()
    seed(fallback)
    store = FallbackDataStore(_DownStore(), fallback)

    assert store.name == "down+fallback"
    assert len(store.list_venues()) == 4


def test_fallback_never_redirects_writes():
    fallback = MemoryDataStore()
    seed(fallback)
    store = FallbackDataStore(_DownStore(), fallback)

    with pytest.raises(BackendUnavailableError):
        store.create_venue(Venue(
            owner_id=1, name="X", location="-", address="-", sport_type="Tennis", hourly_price=Decimal("1"),
        ))
    assert len(fallback.list_venues()) == 4
    # user-specific reads are not served from demo data
    assert store.list_user_bookings(1) == []

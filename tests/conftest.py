from datetime import time
from decimal import Decimal

import pytest

from app import create_app
from config import TestingConfig
from datastore import MemoryDataStore, SqlDataStore
from domain import Equipment, Tutorial, TutorialLesson, UserRole, Venue, VenueAvailability
from models import db
from security.session import create_session
from services.notifications import NotificationBus


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture(params=["sql", "memory"])
def store(request, app, bus):
    """Both data-access implementations, so every contract test runs twice."""
    if request.param == "memory":
        yield MemoryDataStore(bus=bus)
        return
    with app.app_context():
        yield SqlDataStore(bus=bus)
        db.session.remove()


# ---------- catalogue builders ----------
@pytest.fixture
def owner(store):
    return store.create_profile("owner@example.com", role=UserRole.VENUE_OWNER, full_name="Olive Owner")


@pytest.fixture
def player(store):
    return store.create_profile("player@example.com", full_name="Pat Player")


@pytest.fixture
def other_player(store):
    return store.create_profile("second@example.com", full_name="Sam Second")


@pytest.fixture
def venue(store, owner):
    return store.create_venue(Venue(
        owner_id=owner.id,
        name="Premier Basketball Court",
        location="Westside Recreation Center",
        address="789 West Blvd",
        sport_type="Basketball",
        hourly_price=Decimal("30"),
    ))


@pytest.fixture
def equipment(store, owner):
    return store.create_equipment(Equipment(
        owner_id=owner.id,
        name="Road Bike",
        category="cycling",
        brand="Trek",
        daily_price=Decimal("45"),
        weekly_price=Decimal("250"),
        monthly_price=Decimal("800"),
        total_quantity=3,
        available_quantity=3,
    ))


@pytest.fixture
def tutorial(store):
    tutorial = store.create_tutorial(Tutorial(
        title="Tennis Serve Fundamentals", sport_category="Tennis", difficulty="beginner",
    ))
    # added out of order on purpose; lessons are always read by sequence_order
    for order in (3, 1, 5, 2, 4):
        store.add_lesson(TutorialLesson(tutorial_id=tutorial.id, title=f"Lesson {order}", sequence_order=order))
    return tutorial


def add_opening_hours(store, venue_id, start=time(8, 0), end=time(22, 0)):
    for day in range(7):
        store.add_venue_availability(VenueAvailability(
            venue_id=venue_id, day_of_week=day, start_time=start, end_time=end,
        ))


# ---------- HTTP helpers ----------
@pytest.fixture
def login(app):
    """login(email, role) -> headers carrying a fresh bearer token for that profile."""
    def _login(email, role=UserRole.USER):
        with app.app_context():
            store = app.extensions["datastore"]
            profile = store.get_profile_by_email(email)
            if profile is None:
                profile = store.create_profile(email, role=role)
            token = create_session(profile.id)
        return {"Authorization": f"Bearer {token}"}
    return _login

from datetime import time
from decimal import Decimal

from domain import (
    Difficulty,
    Equipment,
    Tutorial,
    TutorialLesson,
    UserRole,
    Venue,
    VenueAvailability,
)

DEMO_OWNER_EMAIL = "owner@sportnexus.local"

VENUES = [
    dict(name="Grand Tennis Court", description="Professional tennis courts with top-quality surfaces",
         location="Downtown Sports Center", address="123 Main St, Downtown", sport_type="Tennis",
         hourly_price="25", half_day_price="100", full_day_price="180", capacity=4),
    dict(name="Olympic Swimming Pool", description="Olympic-sized swimming pool with 8 lanes",
         location="City Sports Complex", address="456 Center Ave, Midtown", sport_type="Swimming",
         hourly_price="15", half_day_price="60", full_day_price="110", capacity=50),
    dict(name="Premier Basketball Court", description="Indoor basketball court with professional flooring",
         location="Westside Recreation Center", address="789 West Blvd, Westside", sport_type="Basketball",
         hourly_price="30", half_day_price="120", full_day_price="220", capacity=20),
    dict(name="Indoor Soccer Field", description="Full-sized indoor soccer field with artificial turf",
         location="East Valley Sports Hub", address="101 East St, Valley", sport_type="Soccer",
         hourly_price="40", half_day_price="160", full_day_price="300", capacity=22),
]

EQUIPMENT = [
    dict(name="Basketball Set", category="ball", brand="Spalding", daily_price="15", weekly_price="80",
         total_quantity=10),
    dict(name="Tennis Racket", category="racket", brand="Wilson", daily_price="12", weekly_price="60",
         total_quantity=6),
    dict(name="Road Bike", category="cycling", brand="Trek", daily_price="45", weekly_price="250",
         monthly_price="800", total_quantity=3),
]

TUTORIALS = [
    dict(title="Tennis Serve Fundamentals", sport_category="Tennis", difficulty=Difficulty.BEGINNER,
         description="Grip, toss and swing path for a reliable first serve.", duration=45,
         lessons=["Grip and stance", "Ball toss", "Swing path", "Follow-through"]),
    dict(title="Freestyle Efficiency", sport_category="Swimming", difficulty=Difficulty.INTERMEDIATE,
         description="Breathing rhythm and body rotation drills.", duration=60,
         lessons=["Body position", "Breathing rhythm", "Catch and pull"]),
]


def seed(store):
    """Load the demo catalogue into `store`; returns the owner profile."""
    owner = store.get_profile_by_email(DEMO_OWNER_EMAIL)
    if owner is None:
        owner = store.create_profile(DEMO_OWNER_EMAIL, role=UserRole.ADMIN, full_name="Demo Owner")

    if not store.list_venues():
        for v in VENUES:
            fields = dict(v)
            for key in ("hourly_price", "half_day_price", "full_day_price"):
                fields[key] = Decimal(fields[key])
            venue = store.create_venue(Venue(owner_id=owner.id, amenities={"parking": True}, **fields))
            for day in range(7):
                store.add_venue_availability(VenueAvailability(
                    venue_id=venue.id, day_of_week=day, start_time=time(8, 0), end_time=time(22, 0),
                ))

    if not store.list_equipment():
        for e in EQUIPMENT:
            fields = dict(e)
            for key in ("daily_price", "weekly_price", "monthly_price"):
                if key in fields:
                    fields[key] = Decimal(fields[key])
            store.create_equipment(Equipment(
                owner_id=owner.id, available_quantity=fields["total_quantity"], **fields
            ))

    if not store.list_tutorials():
        for t in TUTORIALS:
            fields = dict(t)
            titles = fields.pop("lessons")
            tutorial = store.create_tutorial(Tutorial(instructor_id=owner.id, **fields))
            for order, title in enumerate(titles, start=1):
                store.add_lesson(TutorialLesson(tutorial_id=tutorial.id, title=title, sequence_order=order))

    return owner

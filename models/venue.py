from datetime import datetime
from models.db import db


class Venue(db.Model):
    __tablename__ = "venues"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(160), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    amenities = db.Column(db.JSON, nullable=False, default=dict)
    images = db.Column(db.JSON, nullable=False, default=list)

    hourly_price = db.Column(db.Numeric(10, 2), nullable=False)
    half_day_price = db.Column(db.Numeric(10, 2), nullable=True)
    full_day_price = db.Column(db.Numeric(10, 2), nullable=True)

    sport_type = db.Column(db.String(50), nullable=False, index=True)
    capacity = db.Column(db.Integer, nullable=True)
    # bumped by every booking insert; serializes the slot check per venue
    booking_seq = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("hourly_price >= 0", name="ck_venue_hourly_price"),
        db.CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_venue_capacity"),
    )


class VenueAvailability(db.Model):
    __tablename__ = "venue_availability"

    id = db.Column(db.Integer, primary_key=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)  # 0 = Monday
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    is_available = db.Column(db.Boolean, default=True, nullable=False)

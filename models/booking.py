from datetime import datetime
from models.db import db


class Booking(db.Model):
    __tablename__ = "venue_bookings"

    id = db.Column(db.Integer, primary_key=True)

    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    booking_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    # status values: pending, confirmed, cancelled, completed
    status = db.Column(db.String(20), nullable=False, default="pending")
    # payment_status values: pending, paid, refunded, failed
    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    payment_id = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    venue = db.relationship("Venue", lazy="joined")

    __table_args__ = (
        db.Index("ix_venue_bookings_venue_date", "venue_id", "booking_date"),
        db.CheckConstraint("start_time < end_time", name="ck_booking_time_range"),
    )

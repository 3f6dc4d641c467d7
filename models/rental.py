from datetime import datetime
from models.db import db


class Rental(db.Model):
    __tablename__ = "equipment_rentals"

    id = db.Column(db.Integer, primary_key=True)

    equipment_id = db.Column(db.Integer, db.ForeignKey("equipment.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending")
    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    payment_id = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    equipment = db.relationship("Equipment", lazy="joined")

    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_rental_quantity_positive"),
        db.CheckConstraint("end_date >= start_date", name="ck_rental_date_range"),
    )

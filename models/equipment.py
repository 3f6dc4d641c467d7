from datetime import datetime
from models.db import db


class Equipment(db.Model):
    __tablename__ = "equipment"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=False, index=True)
    brand = db.Column(db.String(80), nullable=False)
    images = db.Column(db.JSON, nullable=False, default=list)

    daily_price = db.Column(db.Numeric(10, 2), nullable=False)
    weekly_price = db.Column(db.Numeric(10, 2), nullable=False)
    monthly_price = db.Column(db.Numeric(10, 2), nullable=True)

    total_quantity = db.Column(db.Integer, nullable=False, default=1)
    available_quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # the ledger can never go negative or exceed what the owner holds
        db.CheckConstraint("available_quantity >= 0", name="ck_equipment_available_nonneg"),
        db.CheckConstraint("available_quantity <= total_quantity", name="ck_equipment_available_le_total"),
    )

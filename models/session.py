from datetime import datetime
from models.db import db


class Session(db.Model):
    __tablename__ = "sessions"

    id = db.Column(db.Integer, primary_key=True)
    # profile id in whichever data store is configured
    user_id = db.Column(db.Integer, nullable=False, index=True)

    # hash of the token issued by the identity provider, never the raw token
    token_hash = db.Column(db.String(128), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked = db.Column(db.Boolean, default=False, nullable=False)

import hashlib
import secrets
from datetime import datetime, timedelta
from flask import request, current_app

from models import db
from models.session import Session


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_from_request():
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "sportnexus_session")
    return request.cookies.get(cookie_name)


def create_session(user_id: int) -> str:
    """
    Record a token for `user_id` and return the RAW token. Tokens normally
    come from the identity provider; this is used by the CLI and tests.
    Only the hash is stored.
    """
    raw_token = secrets.token_urlsafe(32)
    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 28800)

    row = Session(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        expires_at=datetime.utcnow() + timedelta(seconds=lifetime),
    )
    db.session.add(row)
    db.session.commit()
    return raw_token


def get_session_from_request():
    raw_token = token_from_request()
    if not raw_token:
        return None

    sess = (
        Session.query
        .filter_by(token_hash=_hash_token(raw_token), revoked=False)
        .first()
    )
    if not sess or sess.expires_at <= datetime.utcnow():
        return None
    return sess


def revoke_session(raw_token: str) -> bool:
    if not raw_token:
        return False
    sess = Session.query.filter_by(token_hash=_hash_token(raw_token)).first()
    if not sess:
        return False
    sess.revoked = True
    db.session.commit()
    return True

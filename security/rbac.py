from functools import wraps
from flask import g, jsonify

from domain import UserRole


def has_role(*role_names: str) -> bool:
    user = getattr(g, "user", None)
    if not user:
        return False
    return user.role == UserRole.ADMIN or user.role in role_names


def require_roles(*role_names: str):
    """
    Usage: @require_roles("venue_owner")   (admins always pass)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401
            if not has_role(*role_names):
                return jsonify(error="Forbidden"), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator

from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from security.session import revoke_session, token_from_request
from utils.auth_context import login_required
from utils.audit import log_event
from utils.serialize import to_json

profile_bp = Blueprint("profile", __name__, url_prefix="/profile")

PROFILE_FIELDS = ("username", "full_name", "phone", "avatar_url")


@profile_bp.get("")
@login_required
def get_profile():
    return jsonify(to_json(g.user)), 200


@profile_bp.post("")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    updates = {}
    for key in PROFILE_FIELDS:
        if key in data:
            value = data[key]
            updates[key] = value.strip() if isinstance(value, str) else value

    if not updates:
        return jsonify(error="Nothing to update"), 400

    profile = get_datastore().update_profile(g.user.id, updates)
    log_event("PROFILE_UPDATE", user_id=g.user.id, entity="user", entity_id=g.user.id,
              metadata={"fields": sorted(updates)})
    return jsonify(to_json(profile)), 200


@profile_bp.post("/logout")
@login_required
def logout():
    revoke_session(token_from_request())
    log_event("LOGOUT", user_id=g.user.id, entity="user", entity_id=g.user.id)
    return jsonify(message="Logged out"), 200

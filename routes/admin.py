import json

from flask import Blueprint, jsonify, g, request

from datastore import get_datastore
from domain import UserRole
from models.audit_log import AuditLog
from security.rbac import require_roles
from utils.audit import log_event
from utils.serialize import to_json

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/users/<int:user_id>")
@require_roles(UserRole.ADMIN)
def get_user(user_id: int):
    profile = get_datastore().get_profile(user_id)
    if not profile:
        return jsonify(error="User not found"), 404
    return jsonify(to_json(profile)), 200


@admin_bp.post("/users/<int:user_id>/role")
@require_roles(UserRole.ADMIN)
def change_role(user_id: int):
    data = request.get_json(silent=True) or {}
    role = (data.get("role") or "").strip().lower()
    if role not in UserRole.ALL:
        return jsonify(error=f"role must be one of {', '.join(UserRole.ALL)}"), 400

    if user_id == g.user.id and role != UserRole.ADMIN:
        return jsonify(error="Admins cannot demote themselves"), 400

    profile = get_datastore().change_user_role(user_id, role)
    log_event("ADMIN_ROLE_CHANGE", user_id=g.user.id, entity="user", entity_id=user_id,
              metadata={"role": role})
    return jsonify(to_json(profile)), 200


@admin_bp.get("/audit-logs")
@require_roles(UserRole.ADMIN)
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    user_id = request.args.get("user_id", type=int)

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action.strip().upper())
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([
        {
            "id": r.id,
            "timestamp": r.timestamp.isoformat(),
            "user_id": r.user_id,
            "action": r.action,
            "entity": r.entity,
            "entity_id": r.entity_id,
            "ip": r.ip,
            "metadata": json.loads(r.metadata_json) if r.metadata_json else None,
        }
        for r in rows
    ]), 200

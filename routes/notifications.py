from flask import Blueprint, request, jsonify, g, current_app

from datastore import get_datastore
from services.notifications import NotificationFeed
from utils.auth_context import login_required
from utils.serialize import parse_int, to_json_list

notification_bp = Blueprint("notification", __name__, url_prefix="/notifications")


def _feed(limit=None):
    limit = limit or current_app.config.get("NOTIFICATION_FEED_LIMIT", 10)
    feed = NotificationFeed(
        get_datastore(), current_app.extensions["notification_bus"], g.user.id, limit=limit
    )
    feed.load()
    return feed


@notification_bp.get("")
@login_required
def list_notifications():
    limit = parse_int(request.args.get("limit"), "limit", required=False, minimum=1)
    feed = _feed(min(limit, 100) if limit else None)
    return jsonify(notifications=to_json_list(feed.notifications), unread_count=feed.unread_count), 200


@notification_bp.get("/unread_count")
@login_required
def unread_count():
    return jsonify(unread_count=get_datastore().count_unread(g.user.id)), 200


@notification_bp.post("/<int:notification_id>/read")
@login_required
def mark_read(notification_id: int):
    feed = _feed()
    feed.mark_as_read(notification_id)
    return jsonify(message="Marked as read", unread_count=get_datastore().count_unread(g.user.id)), 200


@notification_bp.post("/read_all")
@login_required
def mark_all_read():
    _feed().mark_all_as_read()
    return jsonify(message="All notifications marked as read", unread_count=0), 200

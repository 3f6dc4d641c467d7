from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from domain import UserRole, Venue, VenueAvailability
from security.rbac import require_roles
from services import bookings
from services.errors import ForbiddenError, NotFoundError, ValidationError
from utils.auth_context import login_required
from utils.audit import log_event
from utils.serialize import (
    parse_date,
    parse_decimal,
    parse_int,
    parse_time,
    to_json,
    to_json_list,
)

venue_bp = Blueprint("venue", __name__, url_prefix="/venues")

EDITABLE_FIELDS = (
    "name", "description", "location", "address", "amenities", "images",
    "hourly_price", "half_day_price", "full_day_price", "sport_type", "capacity",
)
PRICE_FIELDS = ("hourly_price", "half_day_price", "full_day_price")
REQUIRED_FIELDS = ("name", "location", "address", "sport_type", "hourly_price")


def _clean(data: dict, partial=False) -> dict:
    out = {}
    for key in EDITABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key in PRICE_FIELDS:
            value = parse_decimal(value, key, required=(key == "hourly_price"))
        elif key == "capacity":
            value = parse_int(value, "capacity", required=False, minimum=1)
        elif key == "amenities":
            value = value if isinstance(value, dict) else {}
        elif key == "images":
            value = [str(v) for v in value] if isinstance(value, list) else []
        elif isinstance(value, str):
            value = value.strip()
        out[key] = value

    if not partial:
        missing = [k for k in REQUIRED_FIELDS if out.get(k) in (None, "")]
        if missing:
            raise ValidationError(f"{', '.join(missing)} required")
    return out


def _owned_venue(venue_id):
    venue = get_datastore().get_venue(venue_id)
    if not venue:
        raise NotFoundError("Venue not found")
    if g.user.role != UserRole.ADMIN and venue.owner_id != g.user.id:
        raise ForbiddenError()
    return venue


@venue_bp.get("")
def list_venues():
    filters = {
        "sport_type": request.args.get("sport_type"),
        "location": request.args.get("location"),
        "min_price": parse_decimal(request.args.get("min_price"), "min_price", required=False),
        "max_price": parse_decimal(request.args.get("max_price"), "max_price", required=False),
    }
    return jsonify(to_json_list(get_datastore().list_venues(filters))), 200


@venue_bp.get("/<int:venue_id>")
def get_venue(venue_id: int):
    venue = get_datastore().get_venue(venue_id)
    if not venue:
        return jsonify(error="Venue not found"), 404
    return jsonify(to_json(venue)), 200


# ---------- OWNER/ADMIN: manage venues ----------
@venue_bp.post("")
@require_roles(UserRole.VENUE_OWNER)
def create_venue():
    data = request.get_json(silent=True) or {}
    venue = get_datastore().create_venue(Venue(owner_id=g.user.id, **_clean(data)))
    log_event("VENUE_CREATE", user_id=g.user.id, entity="venue", entity_id=venue.id)
    return jsonify(to_json(venue)), 201


@venue_bp.patch("/<int:venue_id>")
@require_roles(UserRole.VENUE_OWNER)
def update_venue(venue_id: int):
    _owned_venue(venue_id)
    updates = _clean(request.get_json(silent=True) or {}, partial=True)
    if not updates:
        return jsonify(error="Nothing to update"), 400
    venue = get_datastore().update_venue(venue_id, updates)
    log_event("VENUE_UPDATE", user_id=g.user.id, entity="venue", entity_id=venue_id,
              metadata={"fields": sorted(updates)})
    return jsonify(to_json(venue)), 200


@venue_bp.delete("/<int:venue_id>")
@require_roles(UserRole.VENUE_OWNER)
def delete_venue(venue_id: int):
    _owned_venue(venue_id)
    get_datastore().delete_venue(venue_id)
    log_event("VENUE_DELETE", user_id=g.user.id, entity="venue", entity_id=venue_id)
    return jsonify(message="Venue deleted"), 200


# ---------- opening hours ----------
@venue_bp.get("/<int:venue_id>/availability")
def list_availability(venue_id: int):
    if not get_datastore().get_venue(venue_id):
        return jsonify(error="Venue not found"), 404
    return jsonify(to_json_list(get_datastore().list_venue_availability(venue_id))), 200


@venue_bp.post("/<int:venue_id>/availability")
@require_roles(UserRole.VENUE_OWNER)
def add_availability(venue_id: int):
    _owned_venue(venue_id)
    data = request.get_json(silent=True) or {}
    day = parse_int(data.get("day_of_week"), "day_of_week", minimum=0)
    if day > 6:
        return jsonify(error="day_of_week must be 0 (Monday) to 6 (Sunday)"), 400
    start = parse_time(data.get("start_time"), "start_time")
    end = parse_time(data.get("end_time"), "end_time")
    if end <= start:
        return jsonify(error="end_time must be after start_time"), 400

    window = get_datastore().add_venue_availability(VenueAvailability(
        venue_id=venue_id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        is_available=bool(data.get("is_available", True)),
    ))
    log_event("VENUE_AVAILABILITY_ADD", user_id=g.user.id, entity="venue", entity_id=venue_id)
    return jsonify(to_json(window)), 201


# ---------- OWNER/ADMIN: the venue's booking calendar ----------
@venue_bp.get("/<int:venue_id>/bookings")
@login_required
def venue_bookings(venue_id: int):
    date_str = request.args.get("date")
    booking_date = parse_date(date_str) if date_str else None
    rows = bookings.list_bookings_for_venue(get_datastore(), venue_id, g.user, booking_date)
    return jsonify(to_json_list(rows)), 200

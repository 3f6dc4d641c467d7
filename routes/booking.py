from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from services import bookings, payments
from services.errors import ConflictError
from utils.auth_context import login_required
from utils.audit import log_event
from utils.serialize import parse_date, parse_int, parse_time, to_json, to_json_list

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


# ---------- PLAYERS: book a venue slot (conflict-checked) ----------
@booking_bp.post("")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    venue_id = parse_int(data.get("venue_id"), "venue_id")
    if not data.get("booking_date") or not data.get("start_time") or not data.get("end_time"):
        return jsonify(error="venue_id, booking_date, start_time, end_time are required"), 400

    booking_date = parse_date(data["booking_date"], "booking_date")
    start_time = parse_time(data["start_time"], "start_time")
    end_time = parse_time(data["end_time"], "end_time")
    notes = (data.get("notes") or "").strip() or None

    try:
        booking = bookings.check_and_create_booking(
            get_datastore(), g.user.id, venue_id, booking_date, start_time, end_time, notes=notes
        )
    except ConflictError:
        log_event(
            "BOOKING_CONFLICT", user_id=g.user.id, entity="venue", entity_id=venue_id,
            metadata={"date": booking_date.isoformat(), "start": data["start_time"], "end": data["end_time"]},
        )
        raise

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"venue_id": venue_id})
    return jsonify(to_json(booking)), 201


# ---------- PLAYERS: view my bookings ----------
@booking_bp.get("/me")
@login_required
def my_bookings():
    status = request.args.get("status")
    rows = get_datastore().list_user_bookings(g.user.id)
    if status:
        rows = [b for b in rows if b.status == status]
    return jsonify(to_json_list(rows)), 200


@booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    booking = get_datastore().get_booking(booking_id)
    if not booking or booking.user_id != g.user.id:
        return jsonify(error="Booking not found"), 404
    return jsonify(to_json(booking)), 200


# ---------- OWNER/ADMIN: move a booking through its lifecycle ----------
@booking_bp.post("/<int:booking_id>/status")
@login_required
def update_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower()
    if not status:
        return jsonify(error="status required"), 400

    booking = bookings.change_booking_status(get_datastore(), booking_id, status, g.user)
    log_event("BOOKING_STATUS", user_id=g.user.id, entity="booking", entity_id=booking_id,
              metadata={"status": status})
    return jsonify(to_json(booking)), 200


# ---------- PLAYERS: cancel booking ----------
@booking_bp.post("/<int:booking_id>/cancel")
@login_required
def cancel_booking(booking_id: int):
    booking = bookings.cancel_booking(get_datastore(), booking_id, g.user)
    log_event("BOOKING_CANCEL", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return jsonify(to_json(booking)), 200


# ---------- PLAYERS: pay (simulated gateway) ----------
@booking_bp.post("/<int:booking_id>/pay")
@login_required
def pay_booking(booking_id: int):
    booking = payments.pay_booking(get_datastore(), booking_id, g.user)
    log_event("BOOKING_PAYMENT", user_id=g.user.id, entity="booking", entity_id=booking_id,
              metadata={"payment_status": booking.payment_status, "payment_id": booking.payment_id})
    return jsonify(to_json(booking)), 200


@booking_bp.post("/<int:booking_id>/refund")
@login_required
def refund_booking(booking_id: int):
    booking = payments.refund_booking(get_datastore(), booking_id, g.user)
    log_event("BOOKING_REFUND", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return jsonify(to_json(booking)), 200

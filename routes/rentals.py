from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from services import payments, rentals
from services.errors import InsufficientStockError
from utils.auth_context import login_required
from utils.audit import log_event
from utils.serialize import parse_date, parse_int, to_json, to_json_list

rental_bp = Blueprint("rental", __name__, url_prefix="/rentals")


@rental_bp.post("")
@login_required
def create_rental():
    data = request.get_json(silent=True) or {}
    equipment_id = parse_int(data.get("equipment_id"), "equipment_id")
    start_date = parse_date(data.get("start_date"), "start_date")
    end_date = parse_date(data.get("end_date"), "end_date")
    quantity = parse_int(data.get("quantity", 1), "quantity")
    notes = (data.get("notes") or "").strip() or None

    try:
        rental = rentals.check_and_create_rental(
            get_datastore(), g.user.id, equipment_id, start_date, end_date, quantity,
            total_price=data.get("total_price"), notes=notes,
        )
    except InsufficientStockError:
        log_event("RENTAL_INSUFFICIENT_STOCK", user_id=g.user.id, entity="equipment",
                  entity_id=equipment_id, metadata={"quantity": quantity})
        raise

    log_event("RENTAL_CREATE", user_id=g.user.id, entity="rental", entity_id=rental.id,
              metadata={"equipment_id": equipment_id, "quantity": quantity})
    return jsonify(to_json(rental)), 201


@rental_bp.get("/me")
@login_required
def my_rentals():
    status = request.args.get("status")
    rows = get_datastore().list_user_rentals(g.user.id)
    if status:
        rows = [r for r in rows if r.status == status]
    return jsonify(to_json_list(rows)), 200


@rental_bp.post("/<int:rental_id>/status")
@login_required
def update_status(rental_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower()
    if not status:
        return jsonify(error="status required"), 400

    rental = rentals.change_rental_status(get_datastore(), rental_id, status, g.user)
    log_event("RENTAL_STATUS", user_id=g.user.id, entity="rental", entity_id=rental_id,
              metadata={"status": status})
    return jsonify(to_json(rental)), 200


@rental_bp.post("/<int:rental_id>/cancel")
@login_required
def cancel_rental(rental_id: int):
    rental = rentals.cancel_rental(get_datastore(), rental_id, g.user)
    log_event("RENTAL_CANCEL", user_id=g.user.id, entity="rental", entity_id=rental_id)
    return jsonify(to_json(rental)), 200


@rental_bp.post("/<int:rental_id>/pay")
@login_required
def pay_rental(rental_id: int):
    rental = payments.pay_rental(get_datastore(), rental_id, g.user)
    log_event("RENTAL_PAYMENT", user_id=g.user.id, entity="rental", entity_id=rental_id,
              metadata={"payment_status": rental.payment_status, "payment_id": rental.payment_id})
    return jsonify(to_json(rental)), 200


@rental_bp.post("/<int:rental_id>/refund")
@login_required
def refund_rental(rental_id: int):
    rental = payments.refund_rental(get_datastore(), rental_id, g.user)
    log_event("RENTAL_REFUND", user_id=g.user.id, entity="rental", entity_id=rental_id)
    return jsonify(to_json(rental)), 200

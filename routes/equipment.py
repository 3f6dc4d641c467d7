from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from domain import Equipment, UserRole
from security.rbac import require_roles
from services import rentals
from services.errors import ForbiddenError, NotFoundError, ValidationError
from utils.audit import log_event
from utils.serialize import parse_date, parse_decimal, parse_int, to_json, to_json_list

equipment_bp = Blueprint("equipment", __name__, url_prefix="/equipment")

EDITABLE_FIELDS = (
    "name", "description", "category", "brand", "images",
    "daily_price", "weekly_price", "monthly_price", "total_quantity",
)
REQUIRED_FIELDS = ("name", "category", "brand", "daily_price", "weekly_price", "total_quantity")


def _clean(data: dict, partial=False) -> dict:
    out = {}
    for key in EDITABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key.endswith("_price"):
            value = parse_decimal(value, key, required=(key != "monthly_price"))
        elif key == "total_quantity":
            value = parse_int(value, key, minimum=0)
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


@equipment_bp.get("")
def list_equipment():
    filters = {
        "category": request.args.get("category"),
        "brand": request.args.get("brand"),
        "min_price": parse_decimal(request.args.get("min_price"), "min_price", required=False),
        "max_price": parse_decimal(request.args.get("max_price"), "max_price", required=False),
        "only_available": request.args.get("only_available", "").lower() in ("1", "true", "yes"),
    }
    return jsonify(to_json_list(get_datastore().list_equipment(filters))), 200


@equipment_bp.get("/<int:equipment_id>")
def get_equipment(equipment_id: int):
    item = get_datastore().get_equipment(equipment_id)
    if not item:
        return jsonify(error="Equipment not found"), 404
    return jsonify(to_json(item)), 200


@equipment_bp.get("/<int:equipment_id>/quote")
def quote(equipment_id: int):
    start_date = parse_date(request.args.get("start_date"), "start_date")
    end_date = parse_date(request.args.get("end_date"), "end_date")
    quantity = parse_int(request.args.get("quantity", 1), "quantity", minimum=1)
    price = rentals.quote_rental(get_datastore(), equipment_id, start_date, end_date, quantity)
    return jsonify(equipment_id=equipment_id, quantity=quantity, total_price=float(price)), 200


# ---------- OWNER/ADMIN: manage stock ----------
@equipment_bp.post("")
@require_roles(UserRole.EQUIPMENT_OWNER)
def create_equipment():
    fields = _clean(request.get_json(silent=True) or {})
    # a new item starts with its whole stock available
    item = get_datastore().create_equipment(Equipment(
        owner_id=g.user.id, available_quantity=fields["total_quantity"], **fields
    ))
    log_event("EQUIPMENT_CREATE", user_id=g.user.id, entity="equipment", entity_id=item.id)
    return jsonify(to_json(item)), 201


@equipment_bp.patch("/<int:equipment_id>")
@require_roles(UserRole.EQUIPMENT_OWNER)
def update_equipment(equipment_id: int):
    store = get_datastore()
    item = store.get_equipment(equipment_id)
    if not item:
        raise NotFoundError("Equipment not found")
    if g.user.role != UserRole.ADMIN and item.owner_id != g.user.id:
        raise ForbiddenError()

    updates = _clean(request.get_json(silent=True) or {}, partial=True)
    if not updates:
        return jsonify(error="Nothing to update"), 400

    fields = sorted(updates)
    total = updates.pop("total_quantity", None)
    if updates:
        item = store.update_equipment(equipment_id, updates)
    if total is not None:
        # units out on rental stay out; only the idle pool grows or shrinks
        item = store.resize_equipment_stock(equipment_id, total)
    log_event("EQUIPMENT_UPDATE", user_id=g.user.id, entity="equipment", entity_id=equipment_id,
              metadata={"fields": fields})
    return jsonify(to_json(item)), 200

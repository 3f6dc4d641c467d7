from flask import Blueprint, jsonify

from datastore import get_datastore

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(status="ok", datastore=get_datastore().name), 200

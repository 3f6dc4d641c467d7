import json
import logging
from flask import request
from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    logger.debug("audit %s user=%s %s=%s", action, user_id, entity, entity_id)

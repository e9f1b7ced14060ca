import json
import logging
import uuid

from sqlalchemy.orm import Session

from courtside.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

# Actor recorded for changes driven by PayFast callbacks and redirects
PAYFAST_ACTOR = "payfast"


def log_audit(db: Session, actor_user_id: str, action: str, entity_type: str, entity_id: str | None,
              details: dict | None = None) -> AuditLog:
    """Stage an audit row; it is written by the caller's commit, together with the change it records."""
    entry = AuditLog(
        id=str(uuid.uuid4()),
        actor_user_id=(actor_user_id or "")[:36],
        action=action,
        entity_type=entity_type,
        entity_id=(entity_id or "")[:36],
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    )
    db.add(entry)
    logger.debug("audit %s %s=%s actor=%s", action, entity_type, entry.entity_id, entry.actor_user_id)
    return entry

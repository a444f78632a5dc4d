"""
Audit logging for bookings, status transitions and payments.
"""
import json
import logging
from typing import Optional

from sigcd.models import AuditLog

logger = logging.getLogger(__name__)


def log_audit(
    session,
    entity_type: str,
    action: str,
    entity_id=None,
    usuario: Optional[str] = None,
    details: Optional[dict] = None,
) -> None:
    """Add an audit entry to the caller's transaction (committed with it)."""
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        action=action,
        usuario=usuario,
        details=json.dumps(details, default=str) if details else None,
    )
    session.add(entry)
    logger.debug("Audit %s/%s %s", entity_type, entity_id, action)

# backend/consular/services/audit.py
"""
Admin audit trail.

Written after the main operation has committed. A failed audit write is
rolled back and logged; it never changes the outcome of the operation
that triggered it.
"""

import json
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import AdminLogs as DBAdminLog

logger = logging.getLogger(__name__)


def log_admin_action(
    db: Session,
    actor_id: int,
    action: str,
    details: Optional[dict] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[int | str] = None,
    actor_type: str = "admin",
) -> Optional[DBAdminLog]:
    entry = DBAdminLog(
        actor_id=actor_id,
        actor_type=actor_type,
        action=action,
        details=json.dumps(details, default=str) if details is not None else None,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to write audit log {action} for {actor_type}:{actor_id}: {e}")
        return None

    return entry


def list_admin_logs(
    db: Session,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    limit: int = 50,
) -> list[DBAdminLog]:
    q = db.query(DBAdminLog)

    if action:
        q = q.filter(DBAdminLog.action == action)
    if actor_id:
        q = q.filter(DBAdminLog.actor_id == actor_id)
    if resource_type:
        q = q.filter(DBAdminLog.resource_type == resource_type)
    if resource_id:
        q = q.filter(DBAdminLog.resource_id == resource_id)

    return (
        q.order_by(DBAdminLog.created_at.desc(), DBAdminLog.id.desc())
        .limit(min(limit, 200))
        .all()
    )

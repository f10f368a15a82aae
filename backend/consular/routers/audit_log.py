from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_admin_id
from ..models import AdminLogs as DBAdminLog
from ..schemas.audit_log import AdminLogRead
from ..services.audit import list_admin_logs


router = APIRouter(prefix="/admin/audit", tags=["admin: audit"])


@router.get("/", response_model=list[AdminLogRead])
def list_audit(
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    limit: int = 50,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    """
    Read-only admin audit trail, newest first.

    Filters:
    - action (exact match, e.g. BOOKING_CREATED)
    - actor_id
    - resource_type / resource_id
    - limit (default 50, max 200)
    """
    return list_admin_logs(
        db,
        action=action,
        actor_id=actor_id,
        resource_type=resource_type,
        resource_id=resource_id,
        limit=limit,
    )


@router.get("/{id}", response_model=AdminLogRead)
def get_audit(
    id: int,
    admin_id: int = Depends(get_current_admin_id),
    db: Session = Depends(get_db),
):
    obj = db.get(DBAdminLog, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj

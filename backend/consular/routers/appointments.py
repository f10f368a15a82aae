# backend/consular/routers/appointments.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_user_id, get_notifier
from ..schemas.bookings import CancellationRead
from ..services.cancellation import cancel_appointment
from ..services.events import Notifier

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("/{appointment_id}/cancel", response_model=CancellationRead)
def cancel(
    appointment_id: int,
    user_id: int = Depends(get_current_user_id),
    notifier: Notifier | None = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Cancel by appointment id (same rules as POST /booking/{id}/cancel)."""
    return cancel_appointment(db, appointment_id, user_id, notifier=notifier)

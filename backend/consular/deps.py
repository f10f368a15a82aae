# backend/consular/deps.py
# Identity is authenticated upstream (gateway) and forwarded as headers.
# The backend only parses them.

from fastapi import Header, HTTPException

from .services.events import Notifier


def _parse_identity(raw: str | None, header: str) -> int:
    if not raw:
        raise HTTPException(status_code=401, detail=f"Missing {header} header")
    try:
        value = int(raw)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid {header} header") from None
    if value <= 0:
        raise HTTPException(status_code=401, detail=f"Invalid {header} header")
    return value


def get_current_user_id(x_user_id: str | None = Header(None, alias="X-User-ID")) -> int:
    return _parse_identity(x_user_id, "X-User-ID")


def get_current_admin_id(x_admin_id: str | None = Header(None, alias="X-Admin-ID")) -> int:
    return _parse_identity(x_admin_id, "X-Admin-ID")


def get_notifier() -> Notifier | None:
    """Event sink for booking notifications. None = Redis queue."""
    return None

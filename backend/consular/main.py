import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .middleware.access_log import access_log_middleware
from .redis_client import redis_client
from .routers import admin_appointments, appointments, audit_log, bookings, time_slots
from .services.errors import BookingError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Consular Booking API")

app.middleware("http")(access_log_middleware)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# ===== Citizen =====
app.include_router(bookings.router)
app.include_router(appointments.router)

# ===== Admin =====
app.include_router(time_slots.router)
app.include_router(admin_appointments.router)
app.include_router(audit_log.router)


@app.get("/health")
def health():
    db_ok = True
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unavailable")
        db_ok = False

    try:
        redis_ok = bool(redis_client.ping())
    except RedisError:
        redis_ok = False

    return {"database": db_ok, "redis": redis_ok}

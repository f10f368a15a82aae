import os
from datetime import time
from pathlib import Path

from dotenv import load_dotenv


# ======================================================
# ENV
# ======================================================

load_dotenv()

SLOT_DAY_START = os.getenv("SLOT_DAY_START", "09:00")
SLOT_DAY_END = os.getenv("SLOT_DAY_END", "17:00")
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "0") == "1"

# Imported after load_dotenv so Settings sees the same environment
from consular.config import settings  # noqa: E402
from consular.database import SessionLocal, engine  # noqa: E402
from consular.models import (  # noqa: E402
    Base,
    Counters,
    Services,
    SystemConfig,
    TimeSlots,
    VerificationCenters,
)
from consular.services.slots.config import (  # noqa: E402
    SETTINGS_KEY,
    CapacitySettings,
    save_capacity_settings,
)
from consular.services.slots.grid import bulk_create_time_slots  # noqa: E402


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


# ======================================================
# SCHEMA
# ======================================================

def ensure_schema():
    """
    Create missing tables.

    Production databases are migrated with alembic; this only covers a
    fresh local SQLite file.
    """
    url = settings.resolved_database_url
    if url.startswith("sqlite:///"):
        Path(url.replace("sqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(engine)


# ======================================================
# MAIN LOGIC
# ======================================================

def main():
    ensure_schema()
    db = SessionLocal()

    try:
        # --- capacity settings ---
        exists = db.query(SystemConfig).filter(SystemConfig.config_key == SETTINGS_KEY).first()
        if not exists:
            save_capacity_settings(db, CapacitySettings())
            print("[INIT] Default appointment settings created")
        else:
            print("[INIT] Appointment settings already exist, nothing to do")

        # --- daily grid ---
        if db.query(TimeSlots).count() == 0:
            created = bulk_create_time_slots(
                db,
                _parse_time(SLOT_DAY_START),
                _parse_time(SLOT_DAY_END),
                CapacitySettings().slot_duration_minutes,
            )
            print(f"[INIT] {len(created)} time slots created ({SLOT_DAY_START}-{SLOT_DAY_END})")
        else:
            print("[INIT] Time slots already exist, nothing to do")

        # --- demo center ---
        if SEED_DEMO_DATA and db.query(VerificationCenters).count() == 0:
            service = Services(
                category="passport",
                title="Passport Renewal",
                description="Renewal of an expired or expiring passport",
                fees='{"normal": 50, "tatkal": 100}',
                required_documents='["Old passport", "Proof of address", "Photograph"]',
                processing_time="10-15 business days",
            )
            center = VerificationCenters(
                name="Main Consular Center",
                address="1 Embassy Road",
                city="Capital City",
                country="Country",
                operating_hours='{"sun": null}',
            )
            center.services.append(service)
            db.add(center)
            db.flush()

            for name in ("Counter 1", "Counter 2"):
                counter = Counters(center_id=center.id, counter_name=name)
                counter.services.append(service)
                db.add(counter)

            db.commit()
            print(f"[INIT] Demo center created (id={center.id}) with 2 counters")

    finally:
        db.close()


# ======================================================
# ENTRYPOINT
# ======================================================

if __name__ == "__main__":
    main()

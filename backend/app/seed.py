from sqlalchemy.orm import Session

from app.core.db import Base, engine, SessionLocal
from app.models.booking import Booking

import app.models  # noqa

# Dates already on the calendar for the coming season
BOOKED_DATES = [
    "2025-05-10", "2025-05-17", "2025-05-24",
    "2025-06-07", "2025-06-14", "2025-06-21",
    "2025-07-05", "2025-07-12", "2025-07-19",
    "2025-08-02", "2025-08-09", "2025-08-16", "2025-08-30",
    "2025-09-06", "2025-09-13", "2025-09-27",
]


def reset_db(db: Session):
    # Drops & recreates all tables
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_bookings(db: Session, dates: list[str] = BOOKED_DATES) -> int:
    existing = {d for (d,) in db.query(Booking.event_date).filter(Booking.status == "booked").all()}
    added = 0
    for d in dates:
        if d in existing:
            continue
        db.add(Booking(event_date=d, client_name="", status="booked"))
        added += 1
    db.commit()
    return added


def main(reset: bool = False):
    db = SessionLocal()
    try:
        if reset:
            reset_db(db)
        else:
            Base.metadata.create_all(bind=engine)
        added = seed_bookings(db)
        print(f"Seeded {added} booked dates")
    finally:
        db.close()


if __name__ == "__main__":
    import sys

    main(reset="--reset" in sys.argv)

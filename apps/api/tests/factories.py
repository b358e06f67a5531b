from datetime import date, datetime, timedelta, timezone
from itertools import count

from workboard.models.request import WorkRequest
from workboard.schemas.request import WorkRequestOut

BASE_TIME = datetime(2026, 10, 1, 0, 0, tzinfo=timezone.utc)
_ids = count(1)


def make_row(**overrides) -> WorkRequestOut:
    fields = {
        "id": next(_ids),
        "company": "ACME",
        "program": "Banner",
        "pickup_date": date(2026, 10, 20),
        "is_urgent": False,
        "completed": False,
        "is_deleted": False,
        "created_at": BASE_TIME,
    }
    fields.update(overrides)
    return WorkRequestOut(**fields)


def seed(session_factory, **overrides) -> int:
    fields = {
        "company": "ACME",
        "program": "Banner",
        "pickup_date": date(2026, 10, 20),
        "is_urgent": False,
        "completed": False,
        "is_deleted": False,
        "created_at": BASE_TIME,
    }
    fields.update(overrides)
    with session_factory() as session:
        row = WorkRequest(**fields)
        session.add(row)
        session.commit()
        return row.id


def minutes(n: int) -> timedelta:
    return timedelta(minutes=n)

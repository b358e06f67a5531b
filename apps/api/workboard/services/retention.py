from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from ..schemas.request import WorkRequestOut

COMPLETED_CAP = 100
DELETED_CAP = 10
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class RetentionPlan:
    completed_ids: list[int] = field(default_factory=list)
    deleted_ids: list[int] = field(default_factory=list)

    @property
    def ids(self) -> list[int]:
        return self.completed_ids + self.deleted_ids

    def __bool__(self) -> bool:
        return bool(self.completed_ids or self.deleted_ids)


def _excess(rows: list[WorkRequestOut], cap: int, key) -> list[int]:
    if len(rows) <= cap:
        return []
    newest_first = sorted(rows, key=key, reverse=True)
    return [r.id for r in newest_first[cap:]]


def select_victims(
    rows: Iterable[WorkRequestOut],
    *,
    completed_cap: int = COMPLETED_CAP,
    deleted_cap: int = DELETED_CAP,
) -> RetentionPlan:
    """Pick the rows that exceed the per-bucket caps, oldest first to go."""
    rows = list(rows)
    completed = [r for r in rows if r.completed and not r.is_deleted]
    deleted = [r for r in rows if r.is_deleted]
    return RetentionPlan(
        completed_ids=_excess(completed, completed_cap, key=lambda r: (r.created_at, r.id)),
        deleted_ids=_excess(
            deleted,
            deleted_cap,
            key=lambda r: (r.deleted_at or r.created_at or EPOCH, r.id),
        ),
    )

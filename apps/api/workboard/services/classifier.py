"""Bucket assignment and per-bucket ordering for the board.

Everything here is pure: the same snapshot and the same ``today`` always
produce the same board.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable
from zoneinfo import ZoneInfo

from ..core.config import settings
from ..schemas.request import WorkRequestOut

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DELETED_DISPLAY_CAP = 10


class Bucket(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELETED = "deleted"
    JUST_UPLOAD = "just_upload"


@dataclass
class Board:
    in_progress: list[WorkRequestOut] = field(default_factory=list)
    completed: list[WorkRequestOut] = field(default_factory=list)
    deleted: list[WorkRequestOut] = field(default_factory=list)
    just_upload: list[WorkRequestOut] = field(default_factory=list)


def board_today(tz_name: str | None = None) -> date:
    return datetime.now(ZoneInfo(tz_name or settings.board_timezone)).date()


def bucket_of(row: WorkRequestOut) -> Bucket:
    # 플래그가 동시에 켜져 있을 수 있으므로 순서대로 판정
    if row.is_deleted:
        return Bucket.DELETED
    if row.is_just_upload:
        return Bucket.JUST_UPLOAD
    if row.completed:
        return Bucket.COMPLETED
    return Bucket.IN_PROGRESS


def days_left(pickup_date: date | None, today: date) -> int | None:
    if pickup_date is None:
        return None
    return (pickup_date - today).days


def bar_text(is_urgent: bool, left: int | None) -> str:
    if is_urgent:
        return "급함"
    if left is None:
        return "-"
    if left == 0:
        return "오늘"
    if left > 0:
        return f"D-{left}"
    return "지남"


def _in_progress_key(today: date):
    def key(row: WorkRequestOut):
        left = days_left(row.pickup_date, today)
        return (
            not row.is_urgent,
            left is None,
            left if left is not None else 0,
            -row.created_at.timestamp(),
        )
    return key


def partition(
    rows: Iterable[WorkRequestOut],
    today: date | None = None,
    *,
    deleted_display_cap: int = DELETED_DISPLAY_CAP,
) -> Board:
    today = today or board_today()
    board = Board()
    targets = {
        Bucket.IN_PROGRESS: board.in_progress,
        Bucket.COMPLETED: board.completed,
        Bucket.DELETED: board.deleted,
        Bucket.JUST_UPLOAD: board.just_upload,
    }
    for row in rows:
        targets[bucket_of(row)].append(row)

    board.in_progress.sort(key=_in_progress_key(today))
    board.completed.sort(key=lambda r: r.updated_at or r.created_at, reverse=True)
    board.deleted.sort(key=lambda r: r.deleted_at or EPOCH, reverse=True)
    del board.deleted[deleted_display_cap:]
    board.just_upload.sort(key=lambda r: r.created_at, reverse=True)
    return board


def search(rows: Iterable[WorkRequestOut], query: str | None) -> list[WorkRequestOut]:
    """Case-sensitive substring match over company, program and creator."""
    if not query:
        return list(rows)
    return [
        r for r in rows
        if query in (r.company or "") or query in (r.program or "") or query in (r.creator or "")
    ]

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..core.gate import require_gate
from ..schemas.request import BoardOut, InProgressCardOut, WorkRequestOut
from ..services.classifier import bar_text, board_today, days_left, partition, search
from ..services.poller import BoardPoller, Snapshot, get_poller

router = APIRouter(prefix="/board", tags=["board"], dependencies=[Depends(require_gate)])


def to_card(row: WorkRequestOut, today: date) -> InProgressCardOut:
    left = days_left(row.pickup_date, today)
    return InProgressCardOut(
        **row.model_dump(),
        days_left=left,
        bar_text=bar_text(row.is_urgent, left),
    )


def serialize_board(snapshot: Snapshot, q: str | None = None, today: date | None = None) -> BoardOut:
    today = today or board_today()
    board = partition(snapshot.rows, today)
    return BoardOut(
        in_progress=[to_card(r, today) for r in search(board.in_progress, q)],
        completed=search(board.completed, q),
        deleted=board.deleted,
        just_upload=board.just_upload,
        just_upload_count=len(board.just_upload),
        error=snapshot.error,
        fetched_at=snapshot.fetched_at,
    )


@router.get("", response_model=BoardOut)
def get_board(
    q: str | None = Query(default=None),
    poller: BoardPoller = Depends(get_poller),
):
    snapshot = poller.snapshot()
    if snapshot.fetched_at is None:
        snapshot = poller.refresh(wait=True)
    return serialize_board(snapshot, q)


@router.post("/refresh", response_model=BoardOut)
def refresh_board(
    q: str | None = Query(default=None),
    poller: BoardPoller = Depends(get_poller),
):
    return serialize_board(poller.refresh(wait=True), q)

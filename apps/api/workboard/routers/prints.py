from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from ..core.gate import require_gate
from ..services.errors import BoardError
from ..services.poller import BoardPoller, get_poller
from ..services.printing import render_single_image, render_today_work

router = APIRouter(prefix="/prints", tags=["prints"], dependencies=[Depends(require_gate)])


@router.get("/today", response_class=HTMLResponse)
def print_today_work(poller: BoardPoller = Depends(get_poller)):
    snapshot = poller.snapshot()
    if snapshot.fetched_at is None:
        snapshot = poller.refresh(wait=True)
    return HTMLResponse(render_today_work(snapshot.rows))


@router.get("/requests/{request_id}/image", response_class=HTMLResponse)
def print_request_image(request_id: int, poller: BoardPoller = Depends(get_poller)):
    try:
        item = poller.gateway.get(request_id)
    except BoardError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    if not item.image_url:
        raise HTTPException(status_code=404, detail="원고 이미지가 없습니다.")
    return HTMLResponse(render_single_image(item.image_url, item.company, item.program))

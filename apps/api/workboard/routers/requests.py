from __future__ import annotations

from datetime import date
from tempfile import SpooledTemporaryFile

import anyio
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from ..core.gate import require_gate
from ..schemas.commands import (
    Command,
    CompleteRequest,
    CreateRequest,
    EditRequest,
    ImageUpload,
    MoveOutOfHolding,
    PermanentDeleteRequest,
    RecoverRequest,
    SetCheckMarks,
    SoftDeleteRequest,
    ToggleWorkDone,
)
from ..schemas.request import CheckMarksIn, WorkRequestOut
from ..services.errors import BoardError
from ..services.mutations import BoardMutations
from ..services.poller import BoardPoller, get_poller

router = APIRouter(prefix="/requests", tags=["requests"], dependencies=[Depends(require_gate)])

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10MB


def get_mutations(poller: BoardPoller = Depends(get_poller)) -> BoardMutations:
    return BoardMutations(poller.gateway, poller)


def run_command(mutations: BoardMutations, command: Command):
    try:
        return mutations.execute(command)
    except BoardError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)


def parse_pickup_date(raw: str | None) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"픽업일 형식이 올바르지 않습니다: {raw}")


async def spool_image(file: UploadFile | None) -> ImageUpload | None:
    if file is None or not file.filename:
        return None
    content_type = file.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image uploads are allowed")

    spooled = SpooledTemporaryFile(max_size=2 * 1024 * 1024)
    size = 0
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > MAX_IMAGE_BYTES:
            raise HTTPException(status_code=413, detail="Image too large")
        spooled.write(chunk)
    spooled.seek(0)
    return ImageUpload(filename=file.filename, content_type=content_type, fileobj=spooled)


async def run_command_in_thread(mutations: BoardMutations, command: Command):
    # DB 쓰기 + boto3 업로드는 블로킹이므로 스레드에서 실행
    return await anyio.to_thread.run_sync(lambda: run_command(mutations, command))


@router.post("", response_model=WorkRequestOut)
async def create_request(
    company: str = Form(""),
    program: str = Form(""),
    pickup_date: str = Form(""),
    note: str = Form(""),
    is_urgent: bool = Form(False),
    is_just_upload: bool = Form(False),
    creator: str = Form(""),
    image: UploadFile | None = File(None),
    mutations: BoardMutations = Depends(get_mutations),
):
    command = CreateRequest(
        company=company,
        program=program,
        pickup_date=parse_pickup_date(pickup_date),
        note=note,
        is_urgent=is_urgent,
        is_just_upload=is_just_upload,
        creator=creator,
        image=await spool_image(image),
    )
    return await run_command_in_thread(mutations, command)


@router.patch("/{request_id}", response_model=WorkRequestOut)
async def edit_request(
    request_id: int,
    company: str = Form(""),
    program: str = Form(""),
    pickup_date: str = Form(""),
    note: str = Form(""),
    is_urgent: bool | None = Form(None),
    is_just_upload: bool | None = Form(None),
    creator: str = Form(""),
    remove_image: bool = Form(False),
    image: UploadFile | None = File(None),
    mutations: BoardMutations = Depends(get_mutations),
):
    command = EditRequest(
        request_id=request_id,
        company=company,
        program=program,
        pickup_date=parse_pickup_date(pickup_date),
        note=note,
        is_urgent=is_urgent,
        is_just_upload=is_just_upload,
        creator=creator,
        remove_image=remove_image,
        image=await spool_image(image),
    )
    return await run_command_in_thread(mutations, command)


@router.post("/{request_id}/complete", response_model=WorkRequestOut)
def complete_request(request_id: int, mutations: BoardMutations = Depends(get_mutations)):
    return run_command(mutations, CompleteRequest(request_id=request_id))


@router.post("/{request_id}/recover", response_model=WorkRequestOut)
def recover_request(request_id: int, mutations: BoardMutations = Depends(get_mutations)):
    return run_command(mutations, RecoverRequest(request_id=request_id))


@router.post("/{request_id}/move-to-work", response_model=WorkRequestOut)
def move_to_work(request_id: int, mutations: BoardMutations = Depends(get_mutations)):
    return run_command(mutations, MoveOutOfHolding(request_id=request_id))


@router.post("/{request_id}/work-done", response_model=WorkRequestOut)
def toggle_work_done(request_id: int, mutations: BoardMutations = Depends(get_mutations)):
    return run_command(mutations, ToggleWorkDone(request_id=request_id))


@router.put("/{request_id}/check-marks", response_model=WorkRequestOut)
def set_check_marks(
    request_id: int,
    payload: CheckMarksIn,
    mutations: BoardMutations = Depends(get_mutations),
):
    return run_command(mutations, SetCheckMarks(request_id=request_id, check_marks=payload.check_marks))


@router.delete("/{request_id}", response_model=WorkRequestOut)
def soft_delete_request(
    request_id: int,
    confirm: bool = Query(default=False),
    mutations: BoardMutations = Depends(get_mutations),
):
    return run_command(mutations, SoftDeleteRequest(request_id=request_id, confirmed=confirm))


@router.delete("/{request_id}/permanent")
def permanent_delete_request(
    request_id: int,
    confirm: bool = Query(default=False),
    mutations: BoardMutations = Depends(get_mutations),
):
    run_command(mutations, PermanentDeleteRequest(request_id=request_id, confirmed=confirm))
    return {"ok": True, "deleted_request_id": request_id}

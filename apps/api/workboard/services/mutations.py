from __future__ import annotations

from datetime import datetime, timezone
import logging

from ..core.config import settings
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
from ..schemas.request import WorkRequestOut
from .errors import ConfirmationRequired, GatewayError, ValidationFailed
from .gateway import RecordStoreGateway
from .poller import BoardPoller

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "업체명, 프로그램명, 픽업일은 필수입니다."


def _now() -> datetime:
    return datetime.now(timezone.utc)


def validate_required(company: str, program: str, pickup_date) -> None:
    if not (company or "").strip() or not (program or "").strip() or not pickup_date:
        raise ValidationFailed(REQUIRED_FIELDS_MESSAGE)


def validate_creator(creator: str) -> None:
    if creator and creator not in settings.creators:
        raise ValidationFailed(f"알 수 없는 작업자입니다: {creator}")


class BoardMutations:
    """Applies board commands through the gateway and re-syncs the poller.

    A command either fully succeeds (one write, then a refresh) or raises a
    ``BoardError`` and leaves the stored row as it was.
    """

    def __init__(self, gateway: RecordStoreGateway, poller: BoardPoller | None = None):
        self.gateway = gateway
        self.poller = poller

    def execute(self, command: Command) -> WorkRequestOut | None:
        result = self._apply(command)
        if self.poller is not None:
            self.poller.refresh(wait=True)
        return result

    def _upload(self, image: ImageUpload) -> str:
        try:
            return self.gateway.upload_image(image)
        except GatewayError as exc:
            raise exc.with_context("이미지 업로드 실패")

    def _write(self, request_id: int, fields: dict, failure: str) -> WorkRequestOut:
        try:
            return self.gateway.update(request_id, fields)
        except GatewayError as exc:
            raise exc.with_context(failure)

    def _apply(self, command: Command) -> WorkRequestOut | None:
        handler = getattr(self, HANDLERS.get(type(command), ""), None)
        if handler is None:
            raise TypeError(f"unsupported board command: {type(command).__name__}")
        return handler(command)

    def _create(self, command: CreateRequest) -> WorkRequestOut:
        validate_required(command.company, command.program, command.pickup_date)
        validate_creator(command.creator)
        image_url = self._upload(command.image) if command.image else None
        try:
            created = self.gateway.insert(
                {
                    "company": command.company.strip(),
                    "program": command.program.strip(),
                    "pickup_date": command.pickup_date,
                    "note": command.note,
                    "image_url": image_url,
                    "is_urgent": command.is_urgent,
                    "completed": False,
                    "is_deleted": False,
                    "is_just_upload": command.is_just_upload,
                    "creator": command.creator or None,
                }
            )
        except GatewayError as exc:
            if image_url:
                self.gateway.discard_image(image_url)
            raise exc.with_context("등록 실패")
        return created

    def _edit(self, command: EditRequest) -> WorkRequestOut:
        validate_required(command.company, command.program, command.pickup_date)
        validate_creator(command.creator)
        current = self.gateway.get(command.request_id)
        if command.image:
            image_url = self._upload(command.image)
        elif command.remove_image:
            image_url = None
        else:
            image_url = current.image_url
        return self._write(
            command.request_id,
            {
                "company": command.company.strip(),
                "program": command.program.strip(),
                "pickup_date": command.pickup_date,
                "note": command.note,
                "image_url": image_url,
                "is_urgent": current.is_urgent if command.is_urgent is None else command.is_urgent,
                "is_just_upload": (
                    current.is_just_upload if command.is_just_upload is None else command.is_just_upload
                ),
                "creator": command.creator or None,
            },
            "수정 실패",
        )

    def _complete(self, command: CompleteRequest) -> WorkRequestOut:
        current = self.gateway.get(command.request_id)
        if current.completed or current.is_deleted:
            raise ValidationFailed("진행 중인 작업만 완료할 수 있습니다.")
        if current.is_just_upload:
            raise ValidationFailed("원고만 올린 작업은 작업폴더로 이동한 뒤 완료할 수 있습니다.")
        return self._write(
            command.request_id,
            {"completed": True, "is_urgent": False, "updated_at": _now()},
            "완료 처리 실패",
        )

    def _recover(self, command: RecoverRequest) -> WorkRequestOut:
        current = self.gateway.get(command.request_id)
        if not current.completed or current.is_deleted:
            raise ValidationFailed("완료된 작업만 복구할 수 있습니다.")
        return self._write(command.request_id, {"completed": False}, "복구 실패")

    def _soft_delete(self, command: SoftDeleteRequest) -> WorkRequestOut:
        current = self.gateway.get(command.request_id)
        if current.is_deleted:
            raise ValidationFailed("이미 삭제된 작업입니다.")
        if not command.confirmed:
            raise ConfirmationRequired("정말 삭제하시겠습니까? 확인 후 다시 요청하세요.")
        return self._write(
            command.request_id,
            {"is_deleted": True, "deleted_at": _now()},
            "삭제 실패",
        )

    def _permanent_delete(self, command: PermanentDeleteRequest) -> None:
        current = self.gateway.get(command.request_id)
        if not (current.completed or current.is_deleted):
            raise ValidationFailed("완료되었거나 삭제된 작업만 완전 삭제할 수 있습니다.")
        if not command.confirmed:
            raise ConfirmationRequired("진짜로 완전 삭제할까요? 확인 후 다시 요청하세요.")
        try:
            self.gateway.delete(command.request_id)
        except GatewayError as exc:
            raise exc.with_context("완전 삭제 실패")
        logger.info("request permanently deleted (id=%s)", command.request_id)
        return None

    def _move_out_of_holding(self, command: MoveOutOfHolding) -> WorkRequestOut:
        current = self.gateway.get(command.request_id)
        if not current.is_just_upload:
            raise ValidationFailed("원고만 올린 작업이 아닙니다.")
        return self._write(command.request_id, {"is_just_upload": False}, "작업폴더 이동 실패")

    def _toggle_work_done(self, command: ToggleWorkDone) -> WorkRequestOut:
        current = self.gateway.get(command.request_id)
        return self._write(
            command.request_id,
            {"is_work_done": not bool(current.is_work_done)},
            "작업완료 처리 실패",
        )

    def _set_check_marks(self, command: SetCheckMarks) -> WorkRequestOut:
        return self._write(
            command.request_id,
            {"check_marks": [m.model_dump() for m in command.check_marks]},
            "체크 표시 저장 실패",
        )


HANDLERS = {
    CreateRequest: "_create",
    EditRequest: "_edit",
    CompleteRequest: "_complete",
    RecoverRequest: "_recover",
    SoftDeleteRequest: "_soft_delete",
    PermanentDeleteRequest: "_permanent_delete",
    MoveOutOfHolding: "_move_out_of_holding",
    ToggleWorkDone: "_toggle_work_done",
    SetCheckMarks: "_set_check_marks",
}

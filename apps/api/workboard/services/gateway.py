from __future__ import annotations

from datetime import datetime, timezone
import logging
from types import ModuleType
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy import asc, delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core import storage as default_storage
from ..core.storage_keys import request_image_key
from ..db import SessionLocal
from ..models.request import WorkRequest
from ..schemas.commands import ImageUpload
from ..schemas.request import WorkRequestOut
from .errors import GatewayError, RequestNotFound, ValidationFailed

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (ClientError, BotoCoreError, OSError, RuntimeError, ValueError)


class RecordStoreGateway:
    """Reads and writes the ``request`` table and the ``request-images`` bucket.

    Every call opens its own session, so the poller thread and request
    handlers never share one. Rows leave the gateway as detached
    ``WorkRequestOut`` snapshots.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        storage: ModuleType | Any = default_storage,
    ):
        self._session_factory = session_factory
        self._storage = storage

    def fetch_all(self) -> list[WorkRequestOut]:
        stmt = select(WorkRequest).order_by(
            asc(WorkRequest.is_deleted),
            desc(WorkRequest.is_urgent),
            desc(WorkRequest.created_at),
        )
        try:
            with self._session_factory() as session:
                rows = session.scalars(stmt).all()
                return [WorkRequestOut.model_validate(r) for r in rows]
        except SQLAlchemyError as exc:
            logger.exception("request table read failed")
            raise GatewayError(str(exc)) from exc

    def get(self, request_id: int) -> WorkRequestOut:
        try:
            with self._session_factory() as session:
                row = session.get(WorkRequest, request_id)
                if row is None:
                    raise RequestNotFound(request_id)
                return WorkRequestOut.model_validate(row)
        except SQLAlchemyError as exc:
            raise GatewayError(str(exc)) from exc

    def insert(self, fields: dict) -> WorkRequestOut:
        try:
            with self._session_factory() as session:
                row = WorkRequest(created_at=datetime.now(timezone.utc), **fields)
                session.add(row)
                session.commit()
                session.refresh(row)
                logger.info("request created: id=%s company=%s", row.id, row.company)
                return WorkRequestOut.model_validate(row)
        except SQLAlchemyError as exc:
            logger.exception("request insert failed")
            raise GatewayError(str(exc)) from exc

    def update(self, request_id: int, fields: dict) -> WorkRequestOut:
        try:
            with self._session_factory() as session:
                row = session.get(WorkRequest, request_id)
                if row is None:
                    raise RequestNotFound(request_id)
                for name, value in fields.items():
                    setattr(row, name, value)
                session.commit()
                session.refresh(row)
                return WorkRequestOut.model_validate(row)
        except SQLAlchemyError as exc:
            logger.exception("request update failed (id=%s)", request_id)
            raise GatewayError(str(exc)) from exc

    def delete(self, request_id: int) -> bool:
        """Physically remove a row. Returns False when it was already gone."""
        try:
            with self._session_factory() as session:
                result = session.execute(delete(WorkRequest).where(WorkRequest.id == request_id))
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("request delete failed (id=%s)", request_id)
            raise GatewayError(str(exc)) from exc
        removed = bool(result.rowcount)
        if not removed:
            logger.info("request already absent, delete skipped (id=%s)", request_id)
        return removed

    def upload_image(self, image: ImageUpload, *, now_ms: int | None = None) -> str:
        if not (image.content_type or "").startswith("image/"):
            raise ValidationFailed("이미지 파일만 업로드할 수 있습니다.")
        key = request_image_key(filename=image.filename, now_ms=now_ms)
        try:
            self._storage.upload_fileobj(
                fileobj=image.fileobj,
                key=key,
                content_type=image.content_type,
            )
            url = self._storage.get_public_url(key=key)
        except STORAGE_ERRORS as exc:
            logger.exception("request image upload failed (key=%s)", key)
            raise GatewayError(str(exc)) from exc
        logger.info("request image uploaded: key=%s", key)
        return url

    def discard_image(self, image_url: str) -> None:
        """Best-effort removal of an uploaded image whose row was never written."""
        # 키에는 경로 구분자가 없으므로 URL 마지막 조각이 곧 키
        key = image_url.rsplit("/", 1)[-1]
        try:
            self._storage.delete_object(key=key)
        except STORAGE_ERRORS:
            logger.exception("orphaned request image left in storage (key=%s)", key)
            return
        logger.info("orphaned request image removed: key=%s", key)

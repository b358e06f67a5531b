from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import threading

from ..core.config import settings
from ..schemas.request import WorkRequestOut
from .errors import GatewayError
from .gateway import RecordStoreGateway
from .retention import select_victims

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    rows: list[WorkRequestOut] = field(default_factory=list)
    error: str | None = None
    fetched_at: datetime | None = None


class BoardPoller:
    """Keeps the latest ``request`` snapshot and enforces the retention caps.

    Only one fetch runs at a time. A timer tick that finds a fetch in flight
    is dropped; a post-mutation refresh waits for it and then fetches again
    so the caller always sees its own write.
    """

    def __init__(
        self,
        gateway: RecordStoreGateway,
        *,
        interval_seconds: int | None = None,
        completed_cap: int | None = None,
        deleted_cap: int | None = None,
    ):
        self.gateway = gateway
        self.interval_seconds = interval_seconds or settings.poll_interval_seconds
        self.completed_cap = settings.retention_completed_cap if completed_cap is None else completed_cap
        self.deleted_cap = settings.retention_deleted_cap if deleted_cap is None else deleted_cap
        self._snapshot = Snapshot()
        self._state_lock = threading.Lock()
        self._fetch_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def snapshot(self) -> Snapshot:
        with self._state_lock:
            return self._snapshot

    def _publish(self, rows: list[WorkRequestOut], error: str | None) -> Snapshot:
        snap = Snapshot(rows=rows, error=error, fetched_at=datetime.now(timezone.utc))
        with self._state_lock:
            self._snapshot = snap
        return snap

    def refresh(self, *, wait: bool = False) -> Snapshot:
        if not self._fetch_lock.acquire(blocking=wait):
            logger.debug("board fetch already in flight; tick skipped")
            return self.snapshot()
        try:
            return self._fetch_once()
        finally:
            self._fetch_lock.release()

    def _fetch_once(self) -> Snapshot:
        try:
            rows = self.gateway.fetch_all()
        except GatewayError as exc:
            logger.warning("board fetch failed: %s", exc.message)
            return self._publish([], f"데이터 로딩 실패: {exc.message}")
        except Exception as exc:  # noqa: BLE001 - 보드는 빈 목록 + 오류 문구로 계속 동작
            logger.exception("board fetch failed")
            return self._publish([], f"데이터 로딩 실패: {exc}")

        pruned, prune_error = self._apply_retention(rows)
        if pruned:
            rows = [r for r in rows if r.id not in pruned]
        return self._publish(rows, prune_error)

    def _apply_retention(self, rows: list[WorkRequestOut]) -> tuple[set[int], str | None]:
        plan = select_victims(
            rows,
            completed_cap=self.completed_cap,
            deleted_cap=self.deleted_cap,
        )
        if not plan:
            return set(), None

        pruned: set[int] = set()
        error: str | None = None
        for request_id in plan.ids:
            try:
                self.gateway.delete(request_id)
                pruned.add(request_id)
            except GatewayError as exc:
                logger.exception("retention prune failed (id=%s)", request_id)
                error = f"오래된 항목 정리 실패: {exc.message}"
        logger.info(
            "retention pruned %d rows (completed=%d, deleted=%d)",
            len(pruned),
            len(plan.completed_ids),
            len(plan.deleted_ids),
        )
        return pruned, error

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.refresh()
            except Exception:
                logger.exception("board poll failed")

    def start(self, *, background: bool = True) -> None:
        self.refresh(wait=True)
        if not background or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="board-poller", daemon=True)
        self._thread.start()
        logger.info("board poller started: every %ds", self.interval_seconds)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_seconds + 5)
            self._thread = None
            logger.info("board poller stopped")


_poller: BoardPoller | None = None
_poller_lock = threading.Lock()


def start_board_poller(gateway: RecordStoreGateway | None = None) -> BoardPoller:
    global _poller
    with _poller_lock:
        if _poller is None:
            _poller = BoardPoller(gateway or RecordStoreGateway())
            _poller.start(background=settings.poll_enabled)
        return _poller


def stop_board_poller() -> None:
    global _poller
    with _poller_lock:
        if _poller is not None:
            _poller.stop()
            _poller = None


def get_poller() -> BoardPoller:
    # FastAPI dependency; lazily starts the poller when startup did not run
    return _poller or start_board_poller()

import threading
import time

from sqlalchemy import func, select

from factories import BASE_TIME, make_row, minutes, seed
from workboard.models.request import WorkRequest
from workboard.services.errors import GatewayError
from workboard.services.poller import BoardPoller, start_board_poller, stop_board_poller
from workboard.services.retention import select_victims


def _count(session_factory, *where) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(WorkRequest).where(*where))


def test_select_victims_picks_oldest_completed_beyond_cap():
    rows = [make_row(completed=True, created_at=BASE_TIME + minutes(i)) for i in range(105)]
    plan = select_victims(rows)
    assert sorted(plan.completed_ids) == sorted(r.id for r in rows[:5])
    assert plan.deleted_ids == []


def test_select_victims_deleted_uses_deleted_at_then_created_at():
    stamped = [
        make_row(is_deleted=True, deleted_at=BASE_TIME + minutes(100 + i), created_at=BASE_TIME)
        for i in range(10)
    ]
    unstamped_old = make_row(is_deleted=True, deleted_at=None, created_at=BASE_TIME)
    unstamped_new = make_row(is_deleted=True, deleted_at=None, created_at=BASE_TIME + minutes(500))

    plan = select_victims(stamped + [unstamped_old, unstamped_new])

    assert sorted(plan.deleted_ids) == sorted([unstamped_old.id, stamped[0].id])


def test_select_victims_under_cap_is_empty():
    assert not select_victims([make_row(completed=True), make_row(is_deleted=True)])


def test_fetch_prunes_completed_to_cap(session_factory, poller):
    ids = [
        seed(session_factory, completed=True, created_at=BASE_TIME + minutes(i))
        for i in range(105)
    ]

    snapshot = poller.refresh()

    assert _count(session_factory, WorkRequest.completed.is_(True)) == 100
    with session_factory() as session:
        remaining = set(session.scalars(select(WorkRequest.id)).all())
    assert remaining.isdisjoint(ids[:5])
    assert len(snapshot.rows) == 100
    assert snapshot.error is None


def test_fetch_prunes_deleted_to_cap(session_factory, poller):
    ids = [
        seed(
            session_factory,
            is_deleted=True,
            created_at=BASE_TIME,
            deleted_at=BASE_TIME + minutes(12 - i),
        )
        for i in range(12)
    ]

    poller.refresh()

    assert _count(session_factory, WorkRequest.is_deleted.is_(True)) == 10
    with session_factory() as session:
        remaining = set(session.scalars(select(WorkRequest.id)).all())
    # the last two seeded have the oldest deleted_at
    assert remaining.isdisjoint(ids[-2:])


def test_deleting_absent_row_is_a_noop(gateway, session_factory):
    row_id = seed(session_factory)
    assert gateway.delete(row_id) is True
    assert gateway.delete(row_id) is False


class FlakyDeleteGateway:
    def __init__(self, rows, failing_id):
        self.rows = rows
        self.failing_id = failing_id
        self.deleted = []

    def fetch_all(self):
        return list(self.rows)

    def delete(self, request_id):
        if request_id == self.failing_id:
            raise GatewayError("connection reset")
        self.deleted.append(request_id)
        return True


def test_prune_failure_does_not_fail_fetch():
    rows = [make_row(is_deleted=True, deleted_at=BASE_TIME + minutes(i)) for i in range(12)]
    gw = FlakyDeleteGateway(rows, failing_id=rows[0].id)
    poller = BoardPoller(gw, deleted_cap=10)

    snapshot = poller.refresh()

    assert gw.deleted == [rows[1].id]
    assert len(snapshot.rows) == 11
    assert rows[0].id in [r.id for r in snapshot.rows]
    assert snapshot.error.startswith("오래된 항목 정리 실패")


class FailingGateway:
    def __init__(self):
        self.fail = False

    def fetch_all(self):
        if self.fail:
            raise GatewayError("network down")
        return [make_row()]

    def delete(self, request_id):
        return True


def test_fetch_failure_publishes_empty_snapshot_and_error():
    gw = FailingGateway()
    poller = BoardPoller(gw)
    assert len(poller.refresh().rows) == 1

    gw.fail = True
    snapshot = poller.refresh()
    assert snapshot.rows == []
    assert snapshot.error == "데이터 로딩 실패: network down"

    gw.fail = False
    recovered = poller.refresh()
    assert recovered.error is None
    assert len(recovered.rows) == 1


class SlowGateway:
    def __init__(self):
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch_all(self):
        self.calls += 1
        self.entered.set()
        self.release.wait(5)
        return []

    def delete(self, request_id):
        return True


def test_only_one_fetch_in_flight():
    gw = SlowGateway()
    poller = BoardPoller(gw)
    worker = threading.Thread(target=poller.refresh, kwargs={"wait": True})
    worker.start()
    assert gw.entered.wait(5)

    skipped = poller.refresh()

    assert skipped.fetched_at is None
    assert gw.calls == 1
    gw.release.set()
    worker.join(5)
    assert poller.snapshot().fetched_at is not None


class CountingGateway:
    def __init__(self):
        self.calls = 0

    def fetch_all(self):
        self.calls += 1
        time.sleep(0.05)
        return []

    def delete(self, request_id):
        return True


def test_concurrent_first_callers_share_one_poller():
    gw = CountingGateway()
    barrier = threading.Barrier(4)
    started = []

    def first_call():
        barrier.wait(5)
        started.append(start_board_poller(gw))

    workers = [threading.Thread(target=first_call) for _ in range(4)]
    try:
        for w in workers:
            w.start()
        for w in workers:
            w.join(5)
    finally:
        stop_board_poller()

    assert len(started) == 4
    assert len({id(p) for p in started}) == 1
    assert gw.calls == 1

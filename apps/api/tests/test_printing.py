from datetime import datetime, timezone

from factories import make_row
from workboard.services.printing import (
    UNASSIGNED_CREATOR,
    render_single_image,
    render_today_work,
    todays_requests,
)

# 2026-10-18 09:30 KST
NOW = datetime(2026, 10, 18, 0, 30, tzinfo=timezone.utc)


def test_today_uses_korean_calendar_day():
    just_after_midnight_kst = make_row(created_at=datetime(2026, 10, 17, 15, 5, tzinfo=timezone.utc))
    just_before_midnight_kst = make_row(created_at=datetime(2026, 10, 17, 14, 55, tzinfo=timezone.utc))

    grouped = todays_requests([just_after_midnight_kst, just_before_midnight_kst], now=NOW)

    assert [r.id for rows in grouped.values() for r in rows] == [just_after_midnight_kst.id]


def test_groups_by_creator_oldest_first_and_skips_deleted():
    later = make_row(creator="박혜경", created_at=datetime(2026, 10, 18, 0, 20, tzinfo=timezone.utc))
    earlier = make_row(creator="박혜경", created_at=datetime(2026, 10, 18, 0, 10, tzinfo=timezone.utc))
    nobody = make_row(creator=None, created_at=datetime(2026, 10, 18, 0, 15, tzinfo=timezone.utc))
    trashed = make_row(creator="정수원", is_deleted=True, created_at=datetime(2026, 10, 18, 0, 1, tzinfo=timezone.utc))

    grouped = todays_requests([later, earlier, nobody, trashed], now=NOW)

    assert [r.id for r in grouped["박혜경"]] == [earlier.id, later.id]
    assert [r.id for r in grouped[UNASSIGNED_CREATOR]] == [nobody.id]
    assert "정수원" not in grouped


def test_today_page_shows_status_and_kst_time():
    done = make_row(company="A&B", completed=True, created_at=datetime(2026, 10, 18, 0, 10, tzinfo=timezone.utc))
    pending = make_row(company="C", created_at=datetime(2026, 10, 18, 0, 12, tzinfo=timezone.utc))

    page = render_today_work([done, pending], now=NOW)

    assert "A&amp;B" in page
    assert "완료됨" in page
    assert "아직 완료 안 됨" in page
    assert "2026. 10. 18. 09:10:00" in page


def test_today_page_with_nothing_to_print():
    page = render_today_work([], now=NOW)
    assert "creator-block" not in page.split("</style>")[1]


def test_single_image_page_escapes_labels():
    page = render_single_image('https://cdn/a.png?x=1&y="2"', "<ACME>", "배너")
    assert "&lt;ACME&gt;" in page
    assert 'src="https://cdn/a.png?x=1&amp;y=&quot;2&quot;"' in page
    assert "<p>배너</p>" in page

from __future__ import annotations

from datetime import datetime, timezone
import html
from typing import Iterable
from zoneinfo import ZoneInfo

from ..schemas.request import WorkRequestOut

# 출력물은 항상 한국시간(UTC+9) 기준
KST = ZoneInfo("Asia/Seoul")
UNASSIGNED_CREATOR = "미지정"

_TODAY_STYLE = """
    body { font-family: 'Pretendard', 'Noto Sans KR', sans-serif; background: #f8fafc; color: #222; margin: 0; padding: 32px 0; }
    h1 { font-size: 22px; font-weight: 700; margin-bottom: 32px; text-align: center; letter-spacing: -1px; }
    .creator-block { margin-bottom: 40px; background: #fff; border-radius: 18px; padding: 24px 32px; }
    .creator-title { font-size: 18px; font-weight: 600; color: #2563eb; margin-bottom: 18px; }
    table { width: 100%; border-collapse: separate; border-spacing: 0; background: #f9fafb; border-radius: 12px; overflow: hidden; }
    th, td { padding: 10px 12px; font-size: 14px; text-align: left; }
    th { background: #e0e7ef; font-weight: 700; border-bottom: 2px solid #cbd5e1; }
    td { border-bottom: 1px solid #e5e7eb; }
    @media print { body { background: #fff; padding: 0; } .creator-block { padding: 12px 0; } }
"""

_IMAGE_STYLE = """
    body { margin: 0; padding: 20px; display: flex; flex-direction: column; align-items: center; font-family: sans-serif; }
    .header { text-align: center; margin-bottom: 20px; }
    img { max-width: 100%; height: auto; object-fit: contain; }
    @media print { body { padding: 0; } .header { margin-bottom: 10px; } }
"""


def _esc(value: str | None) -> str:
    return html.escape(value or "")


def _kst(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(KST)


def todays_requests(rows: Iterable[WorkRequestOut], now: datetime | None = None) -> dict[str, list[WorkRequestOut]]:
    """Non-deleted rows created on today's KST date, grouped by creator, oldest first."""
    today = _kst(now or datetime.now(timezone.utc)).date()
    todays = sorted(
        (r for r in rows if not r.is_deleted and _kst(r.created_at).date() == today),
        key=lambda r: r.created_at,
    )
    grouped: dict[str, list[WorkRequestOut]] = {}
    for row in todays:
        grouped.setdefault(row.creator or UNASSIGNED_CREATOR, []).append(row)
    return grouped


def render_today_work(rows: Iterable[WorkRequestOut], now: datetime | None = None) -> str:
    blocks = []
    for creator, items in todays_requests(rows, now).items():
        body = "".join(
            f"""
          <tr>
            <td>{_esc(item.company)}</td>
            <td>{_esc(item.program)}</td>
            <td>{_kst(item.created_at).strftime("%Y. %m. %d. %H:%M:%S")}</td>
            <td>{"완료됨" if item.completed else "아직 완료 안 됨"}</td>
          </tr>"""
            for item in items
        )
        blocks.append(
            f"""
    <div class="creator-block">
      <div class="creator-title">{_esc(creator)}</div>
      <table>
        <thead>
          <tr><th>업체명</th><th>프로그램명</th><th>업로드 시간</th><th>완료 여부</th></tr>
        </thead>
        <tbody>{body}
        </tbody>
      </table>
    </div>"""
        )

    return f"""<!DOCTYPE html>
<html lang="ko">
  <head>
    <meta charset="utf-8" />
    <title>오늘 작업 출력</title>
    <style>{_TODAY_STYLE}</style>
  </head>
  <body>
    <h1>오늘 작업한 내용 (한국시간)</h1>{"".join(blocks)}
  </body>
</html>
"""


def render_single_image(image_url: str, company: str, program: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="ko">
  <head>
    <meta charset="utf-8" />
    <title>{_esc(company)} - {_esc(program)} 출력</title>
    <style>{_IMAGE_STYLE}</style>
  </head>
  <body>
    <div class="header">
      <h2>{_esc(company)}</h2>
      <p>{_esc(program)}</p>
    </div>
    <div class="image-container">
      <img src="{_esc(image_url)}" alt="{_esc(company)} - {_esc(program)}" />
    </div>
  </body>
</html>
"""

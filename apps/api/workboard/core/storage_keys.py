from __future__ import annotations

import re
import time

_WHITESPACE_RUN = re.compile(r"\s+")
_PATH_SEPARATOR = re.compile(r"[\\/]")


def _now_millis() -> int:
    return int(time.time() * 1000)


def request_image_key(*, filename: str, now_ms: int | None = None) -> str:
    # 기존에 저장된 image_url과 호환되어야 하므로 형식을 바꾸지 말 것.
    # 예: "My Scan.png" -> "1700000000000_My_Scan.png"
    # 경로 구분자 앞부분은 버림: "../x/evil.png" -> "evil.png"
    millis = _now_millis() if now_ms is None else now_ms
    name = _PATH_SEPARATOR.split(filename or "")[-1] or "image.png"
    return f"{millis}_{_WHITESPACE_RUN.sub('_', name)}"

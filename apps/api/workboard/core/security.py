from datetime import datetime, timedelta, timezone
import base64
import hashlib
import hmac
import jwt
from .config import settings

GATE_SUBJECT = "board"


def hash_password_sha256_b64(pw: str) -> str:
    digest = hashlib.sha256(pw.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")

def _is_sha256_b64(value: str) -> bool:
    try:
        raw = base64.b64decode(value, validate=True)
    except Exception:
        return False
    return len(raw) == 32

def verify_gate_password(pw: str, configured: str | None = None) -> bool:
    expected = settings.gate_password if configured is None else configured
    if not expected or not pw:
        return False
    if hmac.compare_digest(pw.encode("utf-8"), expected.encode("utf-8")):
        return True
    # GATE_PASSWORD 에 평문 대신 sha256(base64) 다이제스트를 넣어둘 수도 있음
    if _is_sha256_b64(expected):
        return hmac.compare_digest(hash_password_sha256_b64(pw), expected)
    return False

def create_gate_token(now: datetime | None = None) -> tuple[str, datetime]:
    issued = now or datetime.now(timezone.utc)
    expires_at = issued + timedelta(hours=settings.gate_session_hours)
    payload = {
        "sub": GATE_SUBJECT,
        "iat": int(issued.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.gate_secret, algorithm="HS256"), expires_at

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.gate_secret, algorithms=["HS256"])

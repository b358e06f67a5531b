from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings
from .security import GATE_SUBJECT, decode_token

bearer = HTTPBearer(auto_error=False)

def require_gate(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> None:
    if not settings.gate_enabled:
        return
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_token(creds.credentials)
    except Exception:
        # 만료된 토큰도 여기서 걸러짐 -> 비밀번호 다시 입력
        raise HTTPException(status_code=401, detail="Invalid token")

    if payload.get("sub") != GATE_SUBJECT:
        raise HTTPException(status_code=401, detail="Invalid token")

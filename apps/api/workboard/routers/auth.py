import logging

from fastapi import APIRouter, HTTPException

from ..core.security import create_gate_token, verify_gate_password
from ..schemas.auth import GateIn, GateTokenOut

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

@router.post("/gate", response_model=GateTokenOut)
def enter_gate(payload: GateIn):
    if not verify_gate_password(payload.password):
        logger.info("gate password rejected")
        raise HTTPException(status_code=401, detail="비밀번호가 올바르지 않습니다.")
    token, expires_at = create_gate_token()
    return GateTokenOut(access_token=token, expires_at=expires_at)

from datetime import datetime

from pydantic import BaseModel


class GateIn(BaseModel):
    password: str


class GateTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime

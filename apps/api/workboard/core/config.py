from pydantic import BaseModel
import os

DEFAULT_CREATORS = "박혜경,김한별,장석환,정수원"


class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./workboard.db")
    board_timezone: str = os.getenv("BOARD_TIMEZONE", "Asia/Seoul")

    # Shared password gate
    gate_enabled: bool = os.getenv("GATE_ENABLED", "true").lower() == "true"
    gate_password: str = os.getenv("GATE_PASSWORD", "")
    gate_secret: str = os.getenv("GATE_SECRET", "dev-secret")
    gate_session_hours: int = int(os.getenv("GATE_SESSION_HOURS", "24"))

    # Board polling / retention
    poll_enabled: bool = os.getenv("POLL_ENABLED", "true").lower() == "true"
    poll_interval_seconds: int = int(os.getenv("POLL_INTERVAL_SECONDS", "15"))
    retention_completed_cap: int = int(os.getenv("RETENTION_COMPLETED_CAP", "100"))
    retention_deleted_cap: int = int(os.getenv("RETENTION_DELETED_CAP", "10"))

    creators: list[str] = [
        c.strip()
        for c in os.getenv("BOARD_CREATORS", DEFAULT_CREATORS).split(",")
        if c.strip()
    ]


settings = Settings()

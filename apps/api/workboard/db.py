from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .core.config import settings


engine = create_engine(
    settings.database_url,
    future=True,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

# 요청마다 새 세션. 폴러 스레드도 호출마다 자기 세션을 연다.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

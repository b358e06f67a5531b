from datetime import date, datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import JSON, String, Text, Boolean, Date, DateTime, Index, false, func


class Base(DeclarativeBase):
    pass


class WorkRequest(Base):
    __tablename__ = "request"
    __table_args__ = (Index("ix_request_is_deleted_created_at", "is_deleted", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    company: Mapped[str] = mapped_column(String(200))
    program: Mapped[str] = mapped_column(String(200))
    pickup_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    completed: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    # 바빠서 원고만 먼저 올린 건
    is_just_upload: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    # 작업완료(픽업 대기) 표시. completed 와는 별개 플래그
    is_work_done: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)

    creator: Mapped[str | None] = mapped_column(String(50), nullable=True)
    check_marks: Mapped[list | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

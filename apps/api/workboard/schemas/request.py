from datetime import date, datetime, timezone

from pydantic import BaseModel, Field, field_validator


class CheckMark(BaseModel):
    x: float
    y: float


class CheckMarksIn(BaseModel):
    check_marks: list[CheckMark] = Field(default_factory=list)


class WorkRequestOut(BaseModel):
    id: int
    company: str
    program: str
    pickup_date: date | None = None
    note: str | None = None
    image_url: str | None = None
    is_urgent: bool = False
    completed: bool = False
    is_deleted: bool = False
    is_just_upload: bool | None = None
    is_work_done: bool | None = None
    creator: str | None = None
    check_marks: list[CheckMark] | None = None
    created_at: datetime
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    class Config:
        from_attributes = True

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite 는 tz 정보를 버리므로 naive 값은 UTC 로 간주
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class InProgressCardOut(WorkRequestOut):
    days_left: int | None = None
    bar_text: str


class BoardOut(BaseModel):
    in_progress: list[InProgressCardOut] = Field(default_factory=list)
    completed: list[WorkRequestOut] = Field(default_factory=list)
    deleted: list[WorkRequestOut] = Field(default_factory=list)
    just_upload: list[WorkRequestOut] = Field(default_factory=list)
    just_upload_count: int = 0
    error: str | None = None
    fetched_at: datetime | None = None

"""Board state transitions as a closed set of typed commands.

Each command carries only the fields its transition needs. Routers build a
command from the HTTP request and hand it to ``BoardMutations.execute``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import BinaryIO, Union

from .request import CheckMark


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content_type: str
    fileobj: BinaryIO


@dataclass(frozen=True)
class CreateRequest:
    company: str
    program: str
    pickup_date: date | None
    note: str = ""
    is_urgent: bool = False
    is_just_upload: bool = False
    creator: str = ""
    image: ImageUpload | None = None


@dataclass(frozen=True)
class EditRequest:
    request_id: int
    company: str
    program: str
    pickup_date: date | None
    note: str = ""
    # None 이면 저장된 값 유지
    is_urgent: bool | None = None
    is_just_upload: bool | None = None
    creator: str = ""
    # 새 이미지가 없으면 기존 image_url 유지
    remove_image: bool = False
    image: ImageUpload | None = None


@dataclass(frozen=True)
class CompleteRequest:
    request_id: int


@dataclass(frozen=True)
class RecoverRequest:
    request_id: int


@dataclass(frozen=True)
class SoftDeleteRequest:
    request_id: int
    confirmed: bool = False


@dataclass(frozen=True)
class PermanentDeleteRequest:
    request_id: int
    confirmed: bool = False


@dataclass(frozen=True)
class MoveOutOfHolding:
    request_id: int


@dataclass(frozen=True)
class ToggleWorkDone:
    request_id: int


@dataclass(frozen=True)
class SetCheckMarks:
    request_id: int
    check_marks: list[CheckMark] = field(default_factory=list)


Command = Union[
    CreateRequest,
    EditRequest,
    CompleteRequest,
    RecoverRequest,
    SoftDeleteRequest,
    PermanentDeleteRequest,
    MoveOutOfHolding,
    ToggleWorkDone,
    SetCheckMarks,
]

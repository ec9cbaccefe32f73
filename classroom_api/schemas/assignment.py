from datetime import datetime

from pydantic import Field

from classroom_api.schemas.base import APIModel


class AssignmentCreate(APIModel):
    title: str = Field(min_length=1, max_length=200)
    text: str = Field(min_length=1)
    marks: int = Field(ge=0, le=1000)


class AssignmentUpdate(AssignmentCreate):
    pass


class AssignmentDto(APIModel):
    id: int
    title: str
    text: str
    marks: int
    classroom_id: int
    classroom_title: str
    created_by_id: str
    created_by_name: str
    created_at: datetime
    submission_count: int
    has_submitted: bool

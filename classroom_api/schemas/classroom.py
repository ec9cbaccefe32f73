from datetime import datetime

from pydantic import Field

from classroom_api.schemas.assignment import AssignmentDto
from classroom_api.schemas.base import APIModel


class ClassroomCreate(APIModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class ClassroomDto(APIModel):
    id: int
    title: str
    description: str | None = None
    created_by_id: str
    created_by_name: str
    created_at: datetime
    assignment_count: int
    student_count: int


class ClassroomDetailDto(APIModel):
    id: int
    title: str
    description: str | None = None
    created_by_id: str
    created_by_name: str
    created_at: datetime
    assignments: list[AssignmentDto] = []
    student_count: int
    is_enrolled: bool

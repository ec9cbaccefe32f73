from datetime import datetime

from classroom_api.schemas.base import APIModel


class SubmissionDto(APIModel):
    id: int
    assignment_id: int
    assignment_title: str
    student_id: str
    student_name: str
    student_email: str
    file_url: str
    submitted_at: datetime

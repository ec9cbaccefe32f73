"""Read-side projections.

Counts and per-principal flags are computed in the same query that reads the
rows, so every response reflects the tables at request time.
"""
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from classroom_api.db.store import is_enrolled
from classroom_api.models.assignment import Assignment
from classroom_api.models.classroom import Classroom
from classroom_api.models.enrollment import Enrollment
from classroom_api.models.submission import Submission
from classroom_api.models.user import User
from classroom_api.schemas.assignment import AssignmentDto
from classroom_api.schemas.classroom import ClassroomDetailDto, ClassroomDto
from classroom_api.schemas.submission import SubmissionDto


def _assignment_count():
    return (
        select(func.count(Assignment.id))
        .where(Assignment.classroom_id == Classroom.id)
        .correlate(Classroom)
        .scalar_subquery()
    )


def _student_count():
    return (
        select(func.count(Enrollment.student_id))
        .where(Enrollment.classroom_id == Classroom.id)
        .correlate(Classroom)
        .scalar_subquery()
    )


def classroom_dtos(db: Session, *criteria) -> list[ClassroomDto]:
    rows = db.execute(
        select(
            Classroom,
            User.full_name,
            _assignment_count().label("assignment_count"),
            _student_count().label("student_count"),
        )
        .join(User, User.id == Classroom.created_by_id)
        .where(*criteria)
        .order_by(Classroom.id.asc())
    ).all()

    return [
        ClassroomDto(
            id=c.id,
            title=c.title,
            description=c.description,
            created_by_id=c.created_by_id,
            created_by_name=creator_name,
            created_at=c.created_at,
            assignment_count=assignment_count or 0,
            student_count=student_count or 0,
        )
        for c, creator_name, assignment_count, student_count in rows
    ]


def owned_classroom_dtos(db: Session, teacher_id: str) -> list[ClassroomDto]:
    return classroom_dtos(db, Classroom.created_by_id == teacher_id)


def enrolled_classroom_dtos(db: Session, student_id: str) -> list[ClassroomDto]:
    enrolled_ids = select(Enrollment.classroom_id).where(Enrollment.student_id == student_id)
    return classroom_dtos(db, Classroom.id.in_(enrolled_ids))


def assignment_dtos(db: Session, viewer_id: str, *criteria) -> list[AssignmentDto]:
    """Assignments with ``submission_count`` and the viewer's ``has_submitted``."""
    submission_count = (
        select(func.count(Submission.id))
        .where(Submission.assignment_id == Assignment.id)
        .correlate(Assignment)
        .scalar_subquery()
    )
    has_submitted = (
        select(Submission.id)
        .where(Submission.assignment_id == Assignment.id, Submission.student_id == viewer_id)
        .correlate(Assignment)
        .exists()
    )

    rows = db.execute(
        select(
            Assignment,
            Classroom.title,
            User.full_name,
            submission_count.label("submission_count"),
            has_submitted.label("has_submitted"),
        )
        .join(Classroom, Classroom.id == Assignment.classroom_id)
        .join(User, User.id == Assignment.created_by_id)
        .where(*criteria)
        .order_by(Assignment.created_at.asc(), Assignment.id.asc())
    ).all()

    return [
        AssignmentDto(
            id=a.id,
            title=a.title,
            text=a.text,
            marks=a.marks,
            classroom_id=a.classroom_id,
            classroom_title=classroom_title,
            created_by_id=a.created_by_id,
            created_by_name=creator_name,
            created_at=a.created_at,
            submission_count=count or 0,
            has_submitted=bool(submitted),
        )
        for a, classroom_title, creator_name, count, submitted in rows
    ]


def assignment_dto(db: Session, viewer_id: str, assignment_id: int) -> AssignmentDto:
    return assignment_dtos(db, viewer_id, Assignment.id == assignment_id)[0]


def classroom_detail(db: Session, classroom: Classroom, viewer_id: str) -> ClassroomDetailDto:
    creator = db.get(User, classroom.created_by_id)
    student_count = db.scalar(
        select(func.count(Enrollment.student_id)).where(Enrollment.classroom_id == classroom.id)
    )

    return ClassroomDetailDto(
        id=classroom.id,
        title=classroom.title,
        description=classroom.description,
        created_by_id=classroom.created_by_id,
        created_by_name=creator.full_name if creator else "",
        created_at=classroom.created_at,
        assignments=assignment_dtos(db, viewer_id, Assignment.classroom_id == classroom.id),
        student_count=student_count or 0,
        is_enrolled=is_enrolled(db, classroom.id, viewer_id),
    )


def submission_dtos(db: Session, *criteria) -> list[SubmissionDto]:
    rows = db.execute(
        select(Submission, Assignment.title, User.full_name, User.email)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .join(User, User.id == Submission.student_id)
        .where(*criteria)
        .order_by(Submission.submitted_at.asc(), Submission.id.asc())
    ).all()

    return [
        SubmissionDto(
            id=s.id,
            assignment_id=s.assignment_id,
            assignment_title=assignment_title,
            student_id=s.student_id,
            student_name=student_name,
            student_email=student_email,
            file_url=s.file_url,
            submitted_at=s.submitted_at,
        )
        for s, assignment_title, student_name, student_email in rows
    ]


def submission_dto(db: Session, submission_id: int) -> SubmissionDto:
    return submission_dtos(db, Submission.id == submission_id)[0]

"""Writes that carry relational invariants.

The existence checks below are only a fast path. The unique keys on
``enrollments`` and ``submissions`` are what actually stop duplicates: a
concurrent insert that slips past the check fails with ``IntegrityError`` and
is reported as the same duplicate error.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom_api.core.errors import DeleteRestricted, DuplicateEnrollment, DuplicateSubmission
from classroom_api.models.assignment import Assignment
from classroom_api.models.classroom import Classroom
from classroom_api.models.enrollment import Enrollment
from classroom_api.models.submission import Submission
from classroom_api.models.user import User

logger = logging.getLogger(__name__)


def is_enrolled(db: Session, classroom_id: int, student_id: str) -> bool:
    return db.get(Enrollment, (student_id, classroom_id)) is not None


def find_submission(db: Session, assignment_id: int, student_id: str) -> Submission | None:
    return db.scalars(
        select(Submission).where(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
    ).first()


def add_enrollment(db: Session, classroom_id: int, student_id: str) -> Enrollment:
    if is_enrolled(db, classroom_id, student_id):
        raise DuplicateEnrollment()

    enrollment = Enrollment(student_id=student_id, classroom_id=classroom_id)
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("enrollment race lost: student=%s classroom=%s", student_id, classroom_id)
        raise DuplicateEnrollment()

    db.refresh(enrollment)
    return enrollment


def add_submission(db: Session, assignment_id: int, student_id: str, file_url: str) -> Submission:
    if find_submission(db, assignment_id, student_id) is not None:
        raise DuplicateSubmission()

    submission = Submission(assignment_id=assignment_id, student_id=student_id, file_url=file_url)
    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("submission race lost: student=%s assignment=%s", student_id, assignment_id)
        raise DuplicateSubmission()

    db.refresh(submission)
    return submission


def delete_assignment(db: Session, assignment: Assignment) -> None:
    # submissions go with it (ON DELETE CASCADE)
    db.delete(assignment)
    db.commit()


def delete_classroom(db: Session, classroom: Classroom) -> None:
    # assignments, enrollments and, through assignments, submissions cascade
    db.delete(classroom)
    db.commit()


def delete_user(db: Session, user: User) -> None:
    """Delete a user, dropping their enrollments.

    Refused while the user still owns classrooms or assignments, or has
    submissions on record.
    """
    owned = {
        "classrooms": db.scalar(
            select(func.count()).select_from(Classroom).where(Classroom.created_by_id == user.id)
        ),
        "assignments": db.scalar(
            select(func.count()).select_from(Assignment).where(Assignment.created_by_id == user.id)
        ),
        "submissions": db.scalar(
            select(func.count()).select_from(Submission).where(Submission.student_id == user.id)
        ),
    }
    blocking = [name for name, count in owned.items() if count]
    if blocking:
        raise DeleteRestricted(f"User still has {', '.join(blocking)} and cannot be deleted")

    db.delete(user)
    try:
        db.commit()
    except IntegrityError:
        # a row referencing the user appeared after the counts above
        db.rollback()
        raise DeleteRestricted("User has dependent records and cannot be deleted")

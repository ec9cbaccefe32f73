import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from classroom_api.core import access, config
from classroom_api.core.access import Principal
from classroom_api.core.current_user import get_current_principal
from classroom_api.core.deps import get_db
from classroom_api.core.errors import DuplicateSubmission, NotFound
from classroom_api.core.permissions import require_student, require_teacher
from classroom_api.db import store
from classroom_api.models.assignment import Assignment
from classroom_api.models.classroom import Classroom
from classroom_api.models.submission import Submission
from classroom_api.schemas.submission import SubmissionDto
from classroom_api.services import projections
from classroom_api.services.storage import StorageGateway, get_storage, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_upload(file: UploadFile) -> bytes:
    # one byte past the limit is enough to reject an oversized file
    data = file.file.read(config.MAX_UPLOAD_BYTES + 1)
    validate_upload(file.filename or "", len(data))
    return data


@router.post(
    "/assignments/{assignment_id}/submission",
    response_model=SubmissionDto,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing, oversized or disallowed file"},
        409: {"description": "Already submitted"},
        502: {"description": "File storage failed"},
    },
)
def submit_assignment(
    assignment_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
    storage: StorageGateway = Depends(get_storage),
):
    data = _read_upload(file)

    assignment = db.get(Assignment, assignment_id)
    enrolled = assignment is not None and store.is_enrolled(db, assignment.classroom_id, student.user_id)
    access.enforce(
        access.create_submission(student, assignment, enrolled),
        not_found="Assignment not found",
        forbidden="Not enrolled in this classroom",
    )

    if store.find_submission(db, assignment_id, student.user_id) is not None:
        raise DuplicateSubmission()

    # nothing is written until the upload has returned a URL
    file_url = storage.upload(data, file.filename)

    try:
        submission = store.add_submission(db, assignment_id, student.user_id, file_url)
    except Exception:
        if not storage.delete(file_url):
            logger.error("orphaned upload left behind: %s", file_url)
        raise

    logger.info("student %s submitted assignment %s", student.user_id, assignment_id)
    return projections.submission_dto(db, submission.id)


@router.get("/assignments/{assignment_id}/submission", response_model=SubmissionDto)
def my_submission(
    assignment_id: int,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    if db.get(Assignment, assignment_id) is None:
        raise NotFound("Assignment not found")

    submission = store.find_submission(db, assignment_id, student.user_id)
    access.enforce(
        access.view_own_submission(student, submission),
        not_found="No submission found for this assignment",
    )
    return projections.submission_dto(db, submission.id)


@router.get("/submissions/{submission_id}", response_model=SubmissionDto)
def get_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    submission = db.get(Submission, submission_id)
    classroom = None
    if submission is not None:
        assignment = db.get(Assignment, submission.assignment_id)
        classroom = db.get(Classroom, assignment.classroom_id)

    access.enforce(
        access.view_submission(principal, submission, classroom),
        not_found="Submission not found",
        forbidden="Not allowed to view this submission",
    )
    return projections.submission_dto(db, submission_id)


@router.get("/classrooms/{classroom_id}/submissions", response_model=list[SubmissionDto])
def list_classroom_submissions(
    classroom_id: int,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    classroom = db.get(Classroom, classroom_id)
    access.enforce(
        access.list_submissions(teacher, classroom),
        not_found="Classroom not found",
        forbidden="Only the classroom owner can view submissions",
    )

    return projections.submission_dtos(db, Assignment.classroom_id == classroom_id)


@router.get("/assignments/{assignment_id}/submissions", response_model=list[SubmissionDto])
def list_assignment_submissions(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")

    classroom = db.get(Classroom, assignment.classroom_id)
    access.enforce(
        access.list_submissions(teacher, classroom),
        not_found="Assignment not found",
        forbidden="Only the classroom owner can view submissions",
    )

    return projections.submission_dtos(db, Submission.assignment_id == assignment_id)

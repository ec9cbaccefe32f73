from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom_api.core import access
from classroom_api.core.access import Principal
from classroom_api.core.current_user import get_current_principal
from classroom_api.core.deps import get_db
from classroom_api.core.permissions import require_student, require_teacher
from classroom_api.db import store
from classroom_api.models.classroom import Classroom
from classroom_api.schemas.base import MessageResponse
from classroom_api.schemas.classroom import ClassroomCreate, ClassroomDetailDto, ClassroomDto
from classroom_api.services import projections

router = APIRouter()


@router.get("", response_model=list[ClassroomDto])
def list_classrooms(db: Session = Depends(get_db)):
    # public listing, no credential required
    return projections.classroom_dtos(db)


@router.get("/my-classrooms", response_model=list[ClassroomDto])
def my_classrooms(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if access.my_classrooms_scope(principal) == "owned":
        return projections.owned_classroom_dtos(db, principal.user_id)
    return projections.enrolled_classroom_dtos(db, principal.user_id)


@router.get(
    "/{classroom_id}",
    response_model=ClassroomDetailDto,
    responses={404: {"description": "Classroom not found"}},
)
def get_classroom(
    classroom_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    classroom = db.get(Classroom, classroom_id)
    access.enforce(access.view_classroom(principal, classroom), not_found="Classroom not found")
    return projections.classroom_detail(db, classroom, principal.user_id)


@router.post("", response_model=ClassroomDto, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    access.enforce(access.create_classroom(teacher))

    classroom = Classroom(
        title=payload.title,
        description=payload.description or "",
        created_by_id=teacher.user_id,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return projections.classroom_dtos(db, Classroom.id == classroom.id)[0]


@router.post(
    "/{classroom_id}/join",
    response_model=MessageResponse,
    responses={
        404: {"description": "Classroom not found"},
        409: {"description": "Already enrolled"},
    },
)
def join_classroom(
    classroom_id: int,
    db: Session = Depends(get_db),
    student: Principal = Depends(require_student),
):
    classroom = db.get(Classroom, classroom_id)
    access.enforce(access.join_classroom(student, classroom), not_found="Classroom not found")

    store.add_enrollment(db, classroom_id, student.user_id)
    return {"message": "Successfully joined the classroom"}

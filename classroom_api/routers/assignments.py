from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom_api.core import access
from classroom_api.core.access import Principal
from classroom_api.core.current_user import get_current_principal
from classroom_api.core.deps import get_db
from classroom_api.core.permissions import require_teacher
from classroom_api.db import store
from classroom_api.models.assignment import Assignment
from classroom_api.models.classroom import Classroom
from classroom_api.schemas.assignment import AssignmentCreate, AssignmentDto, AssignmentUpdate
from classroom_api.schemas.base import MessageResponse
from classroom_api.services import projections

router = APIRouter()


@router.get("/classrooms/{classroom_id}/assignments", response_model=list[AssignmentDto])
def list_assignments(
    classroom_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    classroom = db.get(Classroom, classroom_id)
    enrolled = classroom is not None and store.is_enrolled(db, classroom_id, principal.user_id)
    access.enforce(
        access.view_classroom_content(principal, classroom, enrolled),
        not_found="Classroom not found",
        forbidden="Not enrolled in this classroom",
    )

    return projections.assignment_dtos(db, principal.user_id, Assignment.classroom_id == classroom_id)


@router.get("/assignments/{assignment_id}", response_model=AssignmentDto)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    assignment = db.get(Assignment, assignment_id)
    classroom = db.get(Classroom, assignment.classroom_id) if assignment else None
    enrolled = classroom is not None and store.is_enrolled(db, classroom.id, principal.user_id)
    access.enforce(
        access.view_assignment(principal, assignment, classroom, enrolled),
        not_found="Assignment not found",
        forbidden="Not enrolled in this classroom",
    )

    return projections.assignment_dto(db, principal.user_id, assignment_id)


@router.post(
    "/classrooms/{classroom_id}/assignments",
    response_model=AssignmentDto,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    classroom_id: int,
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    classroom = db.get(Classroom, classroom_id)
    access.enforce(
        access.create_assignment(teacher, classroom),
        not_found="Classroom not found",
        forbidden="Only the classroom owner can create assignments",
    )

    a = Assignment(
        classroom_id=classroom_id,
        created_by_id=teacher.user_id,
        title=payload.title,
        text=payload.text,
        marks=payload.marks,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return projections.assignment_dto(db, teacher.user_id, a.id)


@router.put("/assignments/{assignment_id}", response_model=AssignmentDto)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    a = db.get(Assignment, assignment_id)
    access.enforce(
        access.modify_assignment(teacher, a),
        not_found="Assignment not found",
        forbidden="Only the assignment's creator can change it",
    )

    a.title = payload.title
    a.text = payload.text
    a.marks = payload.marks
    db.commit()
    return projections.assignment_dto(db, teacher.user_id, assignment_id)


@router.delete("/assignments/{assignment_id}", response_model=MessageResponse)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    teacher: Principal = Depends(require_teacher),
):
    a = db.get(Assignment, assignment_id)
    access.enforce(
        access.modify_assignment(teacher, a),
        not_found="Assignment not found",
        forbidden="Only the assignment's creator can delete it",
    )

    store.delete_assignment(db, a)
    return {"message": "Assignment deleted successfully"}

from fastapi import Depends

from classroom_api.core.access import Principal, Role
from classroom_api.core.current_user import get_current_principal
from classroom_api.core.errors import Forbidden


def require_teacher(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.has_role(Role.TEACHER):
        raise Forbidden("Teacher role required")
    return principal


def require_student(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.has_role(Role.STUDENT):
        raise Forbidden("Student role required")
    return principal

"""Authorization and visibility rules.

Every rule is a pure function of the principal and a snapshot of the rows the
request already loaded (``None`` for a row that does not exist). Nothing here
touches the database or remembers earlier answers, so ownership is always
judged on the foreign keys as they are right now.

Evaluation order is fixed: role gate, then existence, then ownership.
Authentication itself is settled earlier by the ``get_current_principal``
dependency.
"""
from dataclasses import dataclass, field
from enum import Enum

from classroom_api.core.errors import Forbidden, NotFound


class Role(str, Enum):
    TEACHER = "Teacher"
    STUDENT = "Student"

    @classmethod
    def parse(cls, names) -> frozenset["Role"]:
        """Keep the known roles out of a list of claim strings."""
        known = {r.value: r for r in cls}
        return frozenset(known[n] for n in names if n in known)


@dataclass(frozen=True)
class Principal:
    user_id: str
    roles: frozenset[Role] = field(default_factory=frozenset)
    email: str = ""
    name: str = ""

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def is_teacher(self) -> bool:
        return Role.TEACHER in self.roles


class Decision(Enum):
    PERMITTED = "permitted"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


def _role_gate(principal: Principal, role: Role) -> Decision:
    return Decision.PERMITTED if principal.has_role(role) else Decision.FORBIDDEN


def _owns(principal: Principal, owned) -> bool:
    return owned.created_by_id == principal.user_id


def list_classrooms() -> Decision:
    return Decision.PERMITTED


def view_classroom(principal: Principal, classroom) -> Decision:
    if classroom is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED


def create_classroom(principal: Principal) -> Decision:
    return _role_gate(principal, Role.TEACHER)


def join_classroom(principal: Principal, classroom) -> Decision:
    gate = _role_gate(principal, Role.STUDENT)
    if gate is not Decision.PERMITTED:
        return gate
    if classroom is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED


def my_classrooms_scope(principal: Principal) -> str:
    """``"owned"`` for teachers, ``"enrolled"`` for everyone else."""
    return "owned" if principal.is_teacher else "enrolled"


def view_classroom_content(principal: Principal, classroom, is_enrolled: bool) -> Decision:
    """Assignments of a classroom: its owner or an enrolled principal."""
    if classroom is None:
        return Decision.NOT_FOUND
    if _owns(principal, classroom) or is_enrolled:
        return Decision.PERMITTED
    return Decision.FORBIDDEN


def view_assignment(principal: Principal, assignment, classroom, is_enrolled: bool) -> Decision:
    if assignment is None or classroom is None:
        return Decision.NOT_FOUND
    return view_classroom_content(principal, classroom, is_enrolled)


def create_assignment(principal: Principal, classroom) -> Decision:
    gate = _role_gate(principal, Role.TEACHER)
    if gate is not Decision.PERMITTED:
        return gate
    if classroom is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED if _owns(principal, classroom) else Decision.FORBIDDEN


def modify_assignment(principal: Principal, assignment) -> Decision:
    """Update or delete: only the teacher who created the assignment."""
    gate = _role_gate(principal, Role.TEACHER)
    if gate is not Decision.PERMITTED:
        return gate
    if assignment is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED if _owns(principal, assignment) else Decision.FORBIDDEN


def create_submission(principal: Principal, assignment, is_enrolled: bool) -> Decision:
    gate = _role_gate(principal, Role.STUDENT)
    if gate is not Decision.PERMITTED:
        return gate
    if assignment is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED if is_enrolled else Decision.FORBIDDEN


def view_submission(principal: Principal, submission, classroom) -> Decision:
    if submission is None or classroom is None:
        return Decision.NOT_FOUND
    if _owns(principal, classroom) or submission.student_id == principal.user_id:
        return Decision.PERMITTED
    return Decision.FORBIDDEN


def view_own_submission(principal: Principal, submission) -> Decision:
    gate = _role_gate(principal, Role.STUDENT)
    if gate is not Decision.PERMITTED:
        return gate
    if submission is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED


def list_submissions(principal: Principal, classroom) -> Decision:
    """Submissions by classroom or by assignment: the owning teacher only."""
    gate = _role_gate(principal, Role.TEACHER)
    if gate is not Decision.PERMITTED:
        return gate
    if classroom is None:
        return Decision.NOT_FOUND
    return Decision.PERMITTED if _owns(principal, classroom) else Decision.FORBIDDEN


def enforce(decision: Decision, *, not_found: str = "Not found", forbidden: str = "Forbidden") -> None:
    if decision is Decision.NOT_FOUND:
        raise NotFound(not_found)
    if decision is Decision.FORBIDDEN:
        raise Forbidden(forbidden)

"""Error taxonomy shared by the routers, the access engine and the store.

Every error is an ``HTTPException`` so FastAPI renders it without extra
handlers; the class names are what the rest of the code raises and catches.
"""
from fastapi import HTTPException, status


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DuplicateEnrollment(Conflict):
    def __init__(self):
        super().__init__("You are already enrolled in this classroom")


class DuplicateSubmission(Conflict):
    def __init__(self):
        super().__init__("You have already submitted this assignment")


class EmailAlreadyRegistered(Conflict):
    def __init__(self):
        super().__init__("Email already registered")


class DeleteRestricted(Conflict):
    pass


class ValidationFailed(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UpstreamFailure(HTTPException):
    def __init__(self, detail: str = "Upstream service failed"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from classroom_api.core.access import Principal, Role
from classroom_api.core.deps import get_db
from classroom_api.core.errors import Unauthenticated
from classroom_api.core.security import InvalidToken, decode_access_token
from classroom_api.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    # roles come from the token claims; they are not looked up again
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated()

    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidToken:
        raise Unauthenticated("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid or expired token")

    return Principal(
        user_id=str(user_id),
        roles=Role.parse(payload.get("roles") or []),
        email=payload.get("email", ""),
        name=payload.get("name", ""),
    )


def get_current_user(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, principal.user_id)
    if user is None:
        # token outlived its account
        raise Unauthenticated("User no longer exists")
    return user

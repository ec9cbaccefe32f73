from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from classroom_api.core.config import (
    ACCESS_TOKEN_EXPIRE,
    ALGORITHM,
    JWT_AUDIENCE,
    JWT_ISSUER,
    SECRET_KEY,
)

PURPOSE_CONFIRM_EMAIL = "confirm-email"
PURPOSE_RESET_PASSWORD = "reset-password"


class InvalidToken(Exception):
    pass


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash or a password bcrypt refuses (> 72 bytes)
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or ACCESS_TOKEN_EXPIRE)
    to_encode.update({"exp": expire, "iss": JWT_ISSUER, "aud": JWT_AUDIENCE})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc
    if "purpose" in payload:
        # confirmation/reset tokens must never authenticate a request
        raise InvalidToken("not an access token")
    return payload


def create_purpose_token(user_id: str, security_stamp: str, purpose: str, expires_delta: timedelta) -> str:
    """Issue a single-use token bound to the user's current security stamp.

    The stamp is rotated when the token is consumed, which invalidates every
    token issued before that point.
    """
    return create_access_token(
        {"sub": user_id, "stamp": security_stamp, "purpose": purpose},
        expires_delta=expires_delta,
    )


def verify_purpose_token(token: str, user_id: str, security_stamp: str, purpose: str) -> None:
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    if payload.get("purpose") != purpose:
        raise InvalidToken("wrong token purpose")
    if payload.get("sub") != user_id:
        raise InvalidToken("token issued for another user")
    if payload.get("stamp") != security_stamp:
        raise InvalidToken("token already used or superseded")

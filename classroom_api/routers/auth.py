import logging
import uuid
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom_api.core.config import (
    CONFIRM_EMAIL_URL,
    EMAIL_CONFIRM_EXPIRE,
    FRONTEND_RESET_URL,
    PASSWORD_RESET_EXPIRE,
)
from classroom_api.core.current_user import get_current_user
from classroom_api.core.deps import get_db
from classroom_api.core.errors import EmailAlreadyRegistered, NotFound, Unauthenticated, ValidationFailed
from classroom_api.core.security import (
    PURPOSE_CONFIRM_EMAIL,
    PURPOSE_RESET_PASSWORD,
    InvalidToken,
    create_access_token,
    create_purpose_token,
    hash_password,
    verify_password,
    verify_purpose_token,
)
from classroom_api.models.user import User, UserRole
from classroom_api.schemas.auth import AuthResponse, ForgotPasswordRequest, LoginRequest, ResetPasswordRequest
from classroom_api.schemas.base import MessageResponse
from classroom_api.schemas.user import RegisterResponse, UserCreate, UserProfile
from classroom_api.services.mail import Mailer, get_mailer, send_safely

logger = logging.getLogger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link has been sent."


def _find_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == email.lower())).first()


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        gender=user.gender,
        age=user.age,
        description=user.description,
        roles=sorted(user.role_names),
    )


def _rotate_stamp(user: User) -> None:
    user.security_stamp = str(uuid.uuid4())


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={
        409: {"description": "Email already registered"},
    },
)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    email = payload.email.lower()
    if _find_by_email(db, email):
        raise EmailAlreadyRegistered()

    user = User(
        email=email,
        full_name=payload.full_name,
        age=payload.age,
        gender=payload.gender,
        description=payload.description,
        hashed_password=hash_password(payload.password),
    )
    user.roles.append(UserRole(role=payload.role))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailAlreadyRegistered()
    db.refresh(user)

    token = create_purpose_token(user.id, user.security_stamp, PURPOSE_CONFIRM_EMAIL, EMAIL_CONFIRM_EXPIRE)
    link = f"{CONFIRM_EMAIL_URL}?{urlencode({'userId': user.id, 'token': token})}"
    send_safely(
        mailer,
        user.email,
        "Confirm Your Email",
        "<h2>Welcome to Assignment Management System!</h2>"
        "<p>Please confirm your email by clicking the link below:</p>"
        f"<a href='{link}'>Confirm Email</a>",
    )

    logger.info("registered %s as %s", user.id, payload.role)
    return {
        "message": "User registered successfully. Please check your email to confirm your account.",
        "user_id": user.id,
    }


@router.get(
    "/confirm-email",
    response_model=MessageResponse,
    responses={400: {"description": "Invalid link or token"}, 404: {"description": "User not found"}},
)
def confirm_email(
    user_id: str | None = Query(default=None, alias="userId"),
    token: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    if not user_id or not token:
        raise ValidationFailed("Invalid confirmation link")

    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    try:
        verify_purpose_token(token, user.id, user.security_stamp, PURPOSE_CONFIRM_EMAIL)
    except InvalidToken as exc:
        logger.info("email confirmation rejected for %s: %s", user.id, exc)
        raise ValidationFailed("Email confirmation failed")

    user.email_confirmed = True
    _rotate_stamp(user)
    db.commit()
    return {"message": "Email confirmed successfully. You can now login."}


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid email or password"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = _find_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise Unauthenticated("Invalid email or password")

    if not user.email_confirmed:
        raise Unauthenticated("Please confirm your email before logging in")

    access_token = create_access_token(
        data={
            "sub": user.id,
            "roles": sorted(user.role_names),
            "email": user.email,
            "name": user.full_name,
        },
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": _profile(user),
    }


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user = _find_by_email(db, payload.email)
    if user is None:
        # same answer as for a known address
        return {"message": FORGOT_PASSWORD_MESSAGE}

    token = create_purpose_token(user.id, user.security_stamp, PURPOSE_RESET_PASSWORD, PASSWORD_RESET_EXPIRE)
    link = f"{FRONTEND_RESET_URL}?{urlencode({'userId': user.id, 'token': token})}"
    send_safely(
        mailer,
        user.email,
        "Reset Your Password",
        "<h2>Password Reset Request</h2>"
        "<p>Click the link below to reset your password:</p>"
        f"<a href='{link}'>Reset Password</a>"
        "<p>If you didn't request this, please ignore this email.</p>",
    )
    return {"message": FORGOT_PASSWORD_MESSAGE}


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"description": "Invalid token"}, 404: {"description": "User not found"}},
)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.get(User, payload.user_id)
    if user is None:
        raise NotFound("User not found")

    try:
        verify_purpose_token(payload.token, user.id, user.security_stamp, PURPOSE_RESET_PASSWORD)
    except InvalidToken as exc:
        logger.info("password reset rejected for %s: %s", user.id, exc)
        raise ValidationFailed("Password reset failed")

    user.hashed_password = hash_password(payload.new_password)
    _rotate_stamp(user)
    db.commit()
    return {"message": "Password reset successfully. You can now login with your new password."}


@router.get("/me", response_model=UserProfile)
def me(current_user: User = Depends(get_current_user)):
    return _profile(current_user)

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from classroom_api.core.config import SEED_DEFAULT_USERS
from classroom_api.core.security import hash_password
from classroom_api.db.base import Base
from classroom_api.db.session import SessionLocal, engine
from classroom_api.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_USERS = (
    {
        "email": "teacher@test.com",
        "password": "Teacher@123",
        "role": "Teacher",
        "full_name": "Default Teacher",
        "age": 30,
        "gender": "Male",
        "description": "Default teacher account for testing",
    },
    {
        "email": "student@test.com",
        "password": "Student@123",
        "role": "Student",
        "full_name": "Default Student",
        "age": 20,
        "gender": "Female",
        "description": "Default student account for testing",
    },
)


def seed_default_users(db: Session) -> None:
    for account in DEFAULT_USERS:
        if db.scalars(select(User).where(User.email == account["email"])).first():
            continue
        user = User(
            email=account["email"],
            full_name=account["full_name"],
            age=account["age"],
            gender=account["gender"],
            description=account["description"],
            hashed_password=hash_password(account["password"]),
            email_confirmed=True,
        )
        user.roles.append(UserRole(role=account["role"]))
        db.add(user)
        logger.info("seeded default %s account %s", account["role"].lower(), account["email"])
    db.commit()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)

    if SEED_DEFAULT_USERS:
        db = SessionLocal()
        try:
            seed_default_users(db)
        except Exception:
            db.rollback()
            logger.exception("An error occurred while seeding the database.")
        finally:
            db.close()

import os
import smtplib
import tempfile
from types import SimpleNamespace

TEST_DB_FILE = "test_classroom_api.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before classroom_api.core.config is imported
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["SEED_DEFAULT_USERS"] = "false"
os.environ["LOCAL_STORAGE_DIR"] = tempfile.mkdtemp(prefix="classroom-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from classroom_api.core.deps import get_db  # noqa: E402
from classroom_api.core.errors import UpstreamFailure  # noqa: E402
from classroom_api.core.security import create_access_token, hash_password  # noqa: E402
from classroom_api.db.base import Base  # noqa: E402
from classroom_api.main import app  # noqa: E402
from classroom_api.models.assignment import Assignment  # noqa: E402
from classroom_api.models.classroom import Classroom  # noqa: E402
from classroom_api.models.enrollment import Enrollment  # noqa: E402
from classroom_api.models.submission import Submission  # noqa: E402
from classroom_api.models.user import User, UserRole  # noqa: E402
from classroom_api.services.mail import get_mailer  # noqa: E402
from classroom_api.services.storage import get_storage, validate_upload  # noqa: E402

PASSWORD = "Passw0rd"
# bcrypt is slow on purpose; hash once for every seeded user
PASSWORD_HASH = hash_password(PASSWORD)

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeStorage:
    """In-memory stand-in for the file storage gateway."""

    def __init__(self):
        self.files = {}
        self.deleted = []
        self.fail_upload = False

    def upload(self, data: bytes, filename: str) -> str:
        validate_upload(filename, len(data))
        if self.fail_upload:
            raise UpstreamFailure("File upload failed: storage unavailable")
        url = f"https://files.example.test/{len(self.files) + 1}/{filename}"
        self.files[url] = data
        return url

    def delete(self, reference: str) -> bool:
        self.deleted.append(reference)
        return self.files.pop(reference, None) is not None


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise smtplib.SMTPException("smtp down")
        self.sent.append(SimpleNamespace(to=to_address, subject=subject, body=html_body))


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


def _user(email: str, name: str, role: str, confirmed: bool = True) -> User:
    user = User(
        email=email,
        full_name=name,
        age=30,
        gender="Other",
        hashed_password=PASSWORD_HASH,
        email_confirmed=confirmed,
    )
    user.roles.append(UserRole(role=role))
    return user


@pytest.fixture(autouse=True)
def seed():
    """Seed a clean minimal dataset for each test.

    Teacher A owns classroom C with assignment Q (marks=50); student S is
    enrolled in C, student T is not. Teacher B owns nothing.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Submission).delete()
        db.query(Assignment).delete()
        db.query(Enrollment).delete()
        db.query(Classroom).delete()
        db.query(UserRole).delete()
        db.query(User).delete()
        db.commit()

        teacher_a = _user("teacher.a@example.com", "Teacher A", "Teacher")
        teacher_b = _user("teacher.b@example.com", "Teacher B", "Teacher")
        student_s = _user("student.s@example.com", "Student S", "Student")
        student_t = _user("student.t@example.com", "Student T", "Student")
        db.add_all([teacher_a, teacher_b, student_s, student_t])
        db.commit()

        classroom = Classroom(title="Algebra", description="Linear algebra", created_by_id=teacher_a.id)
        db.add(classroom)
        db.commit()

        db.add(Enrollment(student_id=student_s.id, classroom_id=classroom.id))
        assignment = Assignment(
            classroom_id=classroom.id,
            created_by_id=teacher_a.id,
            title="Homework 1",
            text="Solve the exercises",
            marks=50,
        )
        db.add(assignment)
        db.commit()

        yield SimpleNamespace(
            teacher_a=teacher_a.id,
            teacher_b=teacher_b.id,
            student_s=student_s.id,
            student_t=student_t.id,
            classroom=classroom.id,
            assignment=assignment.id,
        )
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def client(storage, mailer):
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def bearer(user_id: str, *roles: str) -> dict:
    token = create_access_token({"sub": user_id, "roles": list(roles)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth(seed):
    """Authorization headers per seeded principal."""
    return SimpleNamespace(
        teacher_a=bearer(seed.teacher_a, "Teacher"),
        teacher_b=bearer(seed.teacher_b, "Teacher"),
        student_s=bearer(seed.student_s, "Student"),
        student_t=bearer(seed.student_t, "Student"),
    )

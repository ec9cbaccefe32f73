import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/classroom_api.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# DEV ONLY default secret. Set SECRET_KEY in every real deployment.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
JWT_ISSUER = os.getenv("JWT_ISSUER", "classroom-api")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "classroom-api-clients")
ACCESS_TOKEN_EXPIRE = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")))
EMAIL_CONFIRM_EXPIRE = timedelta(hours=24)
PASSWORD_RESET_EXPIRE = timedelta(hours=1)

# Links in outgoing mail
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
CONFIRM_EMAIL_URL = os.getenv("CONFIRM_EMAIL_URL", f"{PUBLIC_BASE_URL}/auth/confirm-email")
FRONTEND_RESET_URL = os.getenv("FRONTEND_RESET_URL", f"{PUBLIC_BASE_URL}/reset-password")

# Upload policy
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png", ".zip"})

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")  # "local" | "cloudinary"
LOCAL_STORAGE_DIR = Path(os.getenv("LOCAL_STORAGE_DIR", str(BASE_DIR / "uploads")))
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
CLOUDINARY_FOLDER = "assignment-submissions"
STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "30"))

# Mail; an empty SMTP_HOST logs messages instead of sending them
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = _flag("SMTP_USE_TLS", "true")
MAIL_FROM_ADDRESS = os.getenv("MAIL_FROM_ADDRESS", "no-reply@classroom.local")
MAIL_FROM_NAME = "Assignment Management System"

SEED_DEFAULT_USERS = _flag("SEED_DEFAULT_USERS", "true")

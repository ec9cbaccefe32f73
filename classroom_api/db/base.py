# Import every model so Base.metadata knows all tables (used by init_db and alembic)
from classroom_api.db.base_class import Base  # noqa: F401
from classroom_api.models import assignment, classroom, enrollment, submission, user  # noqa: F401

from datetime import datetime, timezone

from sqlmodel import SQLModel, Session, create_engine

from sprintboard.config import DATABASE_URL


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)


def utcnow() -> datetime:
    """Timezone-aware now, used for every created_at / updated_at."""
    return datetime.now(timezone.utc)


def create_db_and_tables():
    # register tables on the metadata
    from sprintboard.models import user, board, sprint  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_db():
    with Session(engine) as session:
        yield session

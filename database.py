from typing import Generator
from sqlmodel import SQLModel, create_engine, Session

from core.config import settings

DATABASE_URL = (settings.DATABASE_URL or "").strip()

# Render/Neon often provide 'postgres://'. SQLAlchemy prefers 'postgresql+psycopg2://'
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)

if not DATABASE_URL:
    # Fallback to local SQLite for quick testing
    DATABASE_URL = "sqlite:///./local.db"

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables() -> None:
    # Table classes must be imported before metadata is populated
    import models.tables  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session

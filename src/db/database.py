"""Save-game database: engine, session factory and schema creation."""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.config import settings
from src.db.models import Base


def build_engine(url: str) -> Engine:
    """SQLite needs check_same_thread off: FastAPI runs sync routes in a threadpool."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind: Engine = engine) -> None:
    """Create every save-game table that does not exist yet."""
    Base.metadata.create_all(bind=bind)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and ensure it is closed after use.

    Usage as a FastAPI dependency::

        @router.post("/guild/save")
        def save(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

import json
import logging
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from staffing_crm.core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def json_dumps(value) -> str:
    return json.dumps(value, ensure_ascii=False)


@lru_cache()
def get_engine() -> Engine:
    """
    Create the engine once per process.

    PostgreSQL gets a connection pool:
    pool_size=5: maintain 5 connections ready
    max_overflow=10: allow 10 extra connections under load

    JSON columns are written without ASCII escaping.
    """
    settings = get_settings()
    url = settings.sqlalchemy_url
    if url.startswith("sqlite"):
        return create_engine(url, json_serializer=json_dumps, connect_args={"check_same_thread": False})
    return create_engine(url, json_serializer=json_dumps, pool_size=5, max_overflow=10, pool_pre_ping=True)


@lru_cache()
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())


@contextmanager
def get_db_session():
    """
    Context manager for database sessions outside of requests.
    Usage:
        with get_db_session() as db:
            db.add(user)
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db():
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/users")
        def list_users(db: Session = Depends(get_db)):
            ...
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that don't exist yet."""
    from staffing_crm.models import entities  # noqa: F401  registers mappers

    Base.metadata.create_all(bind=get_engine())


def check_db_connection(db: Session) -> bool:
    """
    Check if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        return db.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError:
        logger.exception("Database connection failed")
        return False

"""
Database module - SQLAlchemy engine, sessions and schema setup.
"""
from staffing_crm.db.database import Base, get_db, get_db_session, init_db, check_db_connection

__all__ = [
    "Base",
    "get_db",
    "get_db_session",
    "init_db",
    "check_db_connection",
]

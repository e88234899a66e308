"""Database access for Threadline."""

from .session import Base, SessionLocal, get_db, session_scope

__all__ = ["Base", "get_db", "SessionLocal", "session_scope"]

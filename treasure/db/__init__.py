"""Database module for the treasure hunt server."""

from treasure.db.base import Base
from treasure.db.session import get_db, engine, AsyncSessionLocal

__all__ = ["Base", "get_db", "engine", "AsyncSessionLocal"]

"""Database layer — engine setup, ORM base and tables."""

from voltra.db.base import Base
from voltra.db.engine import create_tables, init_engine

__all__ = ["Base", "create_tables", "init_engine"]

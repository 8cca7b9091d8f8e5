"""Database engine setup."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine, make_url

from voltra.db.base import Base


def _ensure_psycopg_driver(url: str) -> str:
    """Rewrite postgresql:// to postgresql+psycopg:// for psycopg v3."""
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if not database or database == ":memory:":
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def init_engine(url: str, **kwargs) -> Engine:
    """Create the engine for *url*, preparing the driver and SQLite directory."""
    url = _ensure_psycopg_driver(url)
    _ensure_sqlite_directory(url)
    return create_engine(url, **kwargs)


def create_tables(engine: Engine) -> None:
    """Create every table registered on Base.metadata."""
    import voltra.db.tables  # noqa: F401 — register tables on Base.metadata

    Base.metadata.create_all(engine)

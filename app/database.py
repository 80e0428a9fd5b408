# app/database.py
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import Settings

# ---------------------------------------------------------
# Engine construction
#
# The engine is built once by create_app() and kept on
# app.state; handlers receive sessions through get_session().
#
# - PostgreSQL: optional sslmode appended to the URL,
#   pool_pre_ping to survive dropped pooler connections.
# - SQLite: check_same_thread disabled because FastAPI runs
#   sync handlers in a threadpool. In-memory databases use a
#   StaticPool so every session sees the same connection.
# ---------------------------------------------------------


def _with_sslmode(db_url: str, sslmode: str | None) -> str:
    """Append sslmode=... to a PostgreSQL URL if configured and absent."""
    if not sslmode or not db_url.startswith("postgres") or "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return f"{db_url}&sslmode={sslmode}"
    return f"{db_url}?sslmode={sslmode}"


def build_engine(settings: Settings) -> Engine:
    """Create the SQLModel engine for the configured DATABASE_URL."""
    db_url = _with_sslmode(settings.DATABASE_URL, settings.DATABASE_SSLMODE)

    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    return create_engine(
        db_url,
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """
    FastAPI dependency that yields a SQLModel Session bound to the
    application's engine.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(request.app.state.engine) as session:
        yield session

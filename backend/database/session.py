# backend/database/session.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import settings

Base = declarative_base()


def _connect_args(url: str, timeout: int) -> dict:
    """Driver-level timeouts passed at connect time, keyed by dialect."""
    if url.startswith("sqlite"):
        return {"timeout": timeout, "check_same_thread": False}
    if url.startswith("mysql"):
        return {"read_timeout": timeout, "write_timeout": timeout}
    return {}


def build_engine(url: str = None, **overrides) -> Engine:
    url = url or settings.DATABASE_URL
    kwargs = dict(
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        future=True,
        connect_args=_connect_args(url, settings.DB_STATEMENT_TIMEOUT),
    )
    if url in ("sqlite://", "sqlite:///:memory:"):
        # in-memory databases live as long as their single connection
        kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
    kwargs.update(overrides)
    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    elif engine.dialect.name == "mssql":
        event.listen(engine, "connect", _query_timeout_setter(settings.DB_STATEMENT_TIMEOUT))
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _query_timeout_setter(timeout: int):
    """pyodbc applies ``Connection.timeout`` to each statement it executes."""
    def set_query_timeout(dbapi_connection, connection_record):
        dbapi_connection.timeout = timeout
    return set_query_timeout


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


engine = build_engine()
SessionLocal = build_session_factory(engine)


def init_db(bind: Engine = None) -> None:
    """Create every table known to the ORM metadata."""
    import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind or engine)

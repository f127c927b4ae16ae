# fleetscore/data/engine/session.py
from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from fleetscore.data.base import Base
from fleetscore.errors import ConfigurationError


def _configure_sqlite_pragmas(engine: Engine, sqlite_busy_timeout_ms: int = 5000) -> None:
    """
    Apply SQLite pragmas on every DB-API connection.
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
        cur = dbapi_connection.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute(f"PRAGMA busy_timeout={int(sqlite_busy_timeout_ms)};")
            # every processed marker is a durable commit
            cur.execute("PRAGMA synchronous=FULL;")
        finally:
            cur.close()


def make_engine(
    db_url: str,
    *,
    echo: bool = False,
    sqlite_timeout_s: int = 30,
    sqlite_busy_timeout_ms: int = 5000,
) -> Engine:
    """
    Create a SQLAlchemy engine.

    Notes:
      - For SQLite we use NullPool: every invocation is short-lived, so pooled
        connections would only hold locks longer.
    """
    if db_url.startswith("sqlite:"):
        engine = create_engine(
            db_url,
            echo=echo,
            connect_args={
                "check_same_thread": False,
                "timeout": int(sqlite_timeout_s),
            },
            poolclass=NullPool,
            pool_pre_ping=True,
        )

        _configure_sqlite_pragmas(engine, sqlite_busy_timeout_ms=sqlite_busy_timeout_ms)
        return engine

    # Postgres / others
    return create_engine(db_url, echo=echo, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    """
    Returns a sessionmaker. Stores create one short-lived session per operation.
    """
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


def create_session_factory_from_url(db_url: str | None, *, echo: bool = False) -> sessionmaker:
    if not db_url:
        raise ConfigurationError(
            "No database configured. Set [database] url in fleetscore.toml "
            "or the DATABASE_URL environment variable."
        )

    engine = make_engine(db_url, echo=echo)

    _import_orm_models()

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise ConfigurationError(f"Database at {engine.url!r} is not reachable: {e}") from e

    return make_session_factory(engine)


def _import_orm_models():
    """
    Ensures all ORM models are imported so that
    Base.metadata knows about them before create_all().
    """
    from fleetscore.data.orm.account import AccountORM  # noqa: F401
    from fleetscore.data.orm.config_lock import ConfigLockORM  # noqa: F401
    from fleetscore.data.orm.run import RunORM  # noqa: F401
    from fleetscore.data.orm.setting import SettingORM  # noqa: F401
    from fleetscore.data.orm.signal_definition import SignalDefinitionORM  # noqa: F401

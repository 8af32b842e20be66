import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def build_database_url(url: str, db_name: str | None = None):
    database_url = make_url(url)
    if db_name:
        database_url = database_url.set(database=db_name)
    return database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, db_name: str | None = None, connect_timeout: int = 5):
    database_url = build_database_url(url, db_name)
    kwargs = {"pool_pre_ping": True}
    if database_url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": connect_timeout}
    else:
        kwargs["connect_args"] = {"connect_timeout": connect_timeout}
        kwargs["pool_timeout"] = connect_timeout
    engine = create_engine(database_url, **kwargs)
    if database_url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# One engine per process, created at import and disposed on shutdown.
engine = build_engine(settings.DATABASE_URL, settings.DB_NAME, settings.DB_CONNECT_TIMEOUT)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(bind=None) -> None:
    """Raise if the datastore does not answer a trivial query."""
    with (bind or engine).connect() as conn:
        conn.execute(text("SELECT 1"))


def init_db(bind=None) -> None:
    """Verify connectivity, then create tables and indexes if missing."""
    bind = bind or engine
    ping(bind)
    # Models must be imported so they register with Base.metadata
    from app.models import admins, events, registrations  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database ready at %s", bind.url.render_as_string(hide_password=True))

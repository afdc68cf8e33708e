import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from app.models.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_transactions(engine: Engine) -> None:
    """
    pysqlite defers BEGIN until the first DML statement, which leaves the
    stock read/update pair of a sale outside the transaction. Take over
    transaction control and turn on foreign keys for every connection.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """Owns the engine and session factory for one database file."""

    def __init__(self, url: str, echo: bool = False):
        self.url = make_url(url)
        is_sqlite = self.url.get_backend_name() == "sqlite"

        self.engine = create_engine(
            url,
            connect_args={"check_same_thread": False} if is_sqlite else {},
            echo=echo,
            future=True,
        )
        if is_sqlite:
            _enable_sqlite_transactions(self.engine)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
            future=True,
        )

    def ensure_directory(self) -> None:
        """Create the parent directory of a SQLite database file."""
        if self.url.get_backend_name() == "sqlite" and self.url.database not in (None, "", ":memory:"):
            Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)

    def create_all(self) -> None:
        import app.models  # noqa: F401  registers every table on Base.metadata

        Base.metadata.create_all(bind=self.engine)
        logger.info("Schema ensured on %s", self.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")

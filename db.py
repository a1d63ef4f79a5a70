# db.py - SQLAlchemy engine and session, wrapped in a store handle
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from models import Base

logger = logging.getLogger("loan-manager.db")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one database URL.

    Nothing is connected until open() is called; close() disposes the pool.
    """

    def __init__(self, url, echo=False):
        self.url = url
        self.echo = echo
        self.engine = None
        self.SessionLocal = None

    @property
    def is_open(self):
        return self.engine is not None

    def open(self):
        if self.is_open:
            return self
        connect_args = {}
        is_sqlite = self.url.startswith("sqlite")
        if is_sqlite:
            # sessions are handed to FastAPI's threadpool
            connect_args["check_same_thread"] = False
        self.engine = create_engine(self.url, echo=self.echo, future=True, connect_args=connect_args)
        if is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False, future=True)

        # CREATE TABLE IF NOT EXISTS for every model
        Base.metadata.create_all(bind=self.engine)
        logger.info("Connected to database %s", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self):
        if not self.is_open:
            return
        self.engine.dispose()
        logger.info("Database connection closed")
        self.engine = None
        self.SessionLocal = None

    def session(self):
        if not self.is_open:
            raise RuntimeError("Database is not open")
        return self.SessionLocal()

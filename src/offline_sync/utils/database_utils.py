"""
Database helpers

Session/connection context managers over the local engine, plus the
connection check used by the scheduler on startup.
"""

from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from offline_sync.utils.loguru_setting import logger
from offline_sync.global_const.global_const import get_local_engine


class DatabaseManager:
    """Database manager"""

    def __init__(self, engine=None):
        """
        Args:
            engine: database engine, defaults to the local engine
        """
        self.engine = engine or get_local_engine()
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def get_connection(self):
        """
        Connection context manager

        Yields:
            connection: database connection
        """
        conn = None
        try:
            conn = self.engine.connect()
            yield conn
        except Exception as e:
            logger.error(f"[DB_MANAGER] database connection error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_session(self):
        """
        Session context manager, commits on success and rolls back on error

        Yields:
            session: database session
        """
        session = None
        try:
            session = self.Session()
            yield session
            session.commit()
        except Exception as e:
            if session:
                session.rollback()
            logger.error(f"[DB_MANAGER] database session error: {e}")
            raise
        finally:
            if session:
                session.close()

    def check_connection(self) -> bool:
        """Run a trivial query; raises when the database is unreachable"""
        with self.get_connection() as conn:
            conn.execute(text("SELECT 1"))
        return True

from loguru import logger
from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Integer, func, inspect
from sqlalchemy.orm import declarative_base

from offline_sync.global_const.const_config import AVAILABLE_OFFLINE_SYNC_ROW_ID
from offline_sync.global_const.global_const import get_local_engine

Base = declarative_base()


class AvailableOfflineSyncTable(Base):
    __tablename__ = "available_offline_sync"

    # single row table: the primary key can only take the singleton id
    __table_args__ = (
        CheckConstraint(
            f"id = {AVAILABLE_OFFLINE_SYNC_ROW_ID}",
            name="ck_available_offline_sync_singleton",
        ),
        {"comment": "available offline synchronization checkpoint"},
    )

    id = Column(Integer, primary_key=True, autoincrement=False, comment="singleton row id")
    available_offline_last_sync = Column(
        BigInteger,
        nullable=False,
        comment="last synchronized point in time (ms since epoch)",
    )

    created_at = Column(DateTime, server_default=func.now(), comment="created at")
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), comment="updated at")


def create_tables(engine=None):
    """
    Create the client tables (idempotent)

    Args:
        engine: database engine, defaults to the local engine
    """
    engine = engine or get_local_engine()
    Base.metadata.create_all(engine)

    existing = inspect(engine).get_table_names()
    logger.info(f"[TABLE] tables ready: {', '.join(sorted(existing))}")

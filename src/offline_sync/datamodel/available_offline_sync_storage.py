"""
Checkpoint store for the available offline synchronization

Reads and writes the single checkpoint row. No copy of the record is kept
between calls; every operation opens its own session.
"""

from typing import Optional

from sqlalchemy import delete, update

from offline_sync.datamodel.data_models import AvailableOfflineSync, CheckpointExistsError
from offline_sync.global_const.const_config import AVAILABLE_OFFLINE_SYNC_ROW_ID
from offline_sync.utils.create_table import AvailableOfflineSyncTable
from offline_sync.utils.database_utils import DatabaseManager
from offline_sync.utils.loguru_setting import logger


class AvailableOfflineSyncStorageManager:
    """Access to the available offline synchronization checkpoint"""

    def __init__(self, engine=None):
        """
        Args:
            engine: database engine, defaults to the local engine
        """
        self.db_manager = DatabaseManager(engine)

    @staticmethod
    def _to_model(row: AvailableOfflineSyncTable) -> AvailableOfflineSync:
        return AvailableOfflineSync(
            available_offline_last_sync=int(row.available_offline_last_sync),
            id=row.id,
        )

    def get_available_offline_sync(self) -> Optional[AvailableOfflineSync]:
        """
        Read the checkpoint

        Returns:
            Optional[AvailableOfflineSync]: the checkpoint, None if never created
        """
        with self.db_manager.get_session() as session:
            row = session.get(AvailableOfflineSyncTable, AVAILABLE_OFFLINE_SYNC_ROW_ID)
            return self._to_model(row) if row is not None else None

    def create_available_offline_sync(self, timestamp: int) -> AvailableOfflineSync:
        """
        Create the checkpoint

        Raises:
            CheckpointExistsError: the checkpoint already exists
        """
        with self.db_manager.get_session() as session:
            existing = session.get(AvailableOfflineSyncTable, AVAILABLE_OFFLINE_SYNC_ROW_ID)
            if existing is not None:
                raise CheckpointExistsError("available offline sync checkpoint already exists")

            row = AvailableOfflineSyncTable(
                id=AVAILABLE_OFFLINE_SYNC_ROW_ID,
                available_offline_last_sync=int(timestamp),
            )
            session.add(row)
            logger.debug(f"[STORAGE] checkpoint created: {timestamp}")
            return AvailableOfflineSync(available_offline_last_sync=int(timestamp))

    def update_available_offline_sync(self, available_offline_sync: AvailableOfflineSync) -> bool:
        """
        Overwrite the timestamp of the existing checkpoint

        Returns:
            bool: True if a row was updated
        """
        with self.db_manager.get_session() as session:
            result = session.execute(
                update(AvailableOfflineSyncTable)
                .where(AvailableOfflineSyncTable.id == AVAILABLE_OFFLINE_SYNC_ROW_ID)
                .values(available_offline_last_sync=int(available_offline_sync.available_offline_last_sync))
            )
            updated = result.rowcount > 0

        if updated:
            logger.debug(
                f"[STORAGE] checkpoint updated: {available_offline_sync.available_offline_last_sync}"
            )
        return updated

    def store_available_offline_sync(self, available_offline_sync: AvailableOfflineSync) -> AvailableOfflineSync:
        """Create the checkpoint or overwrite its timestamp"""
        timestamp = int(available_offline_sync.available_offline_last_sync)
        with self.db_manager.get_session() as session:
            row = session.get(AvailableOfflineSyncTable, AVAILABLE_OFFLINE_SYNC_ROW_ID)
            if row is None:
                session.add(
                    AvailableOfflineSyncTable(
                        id=AVAILABLE_OFFLINE_SYNC_ROW_ID,
                        available_offline_last_sync=timestamp,
                    )
                )
                logger.debug(f"[STORAGE] checkpoint created: {timestamp}")
            else:
                row.available_offline_last_sync = timestamp
                logger.debug(f"[STORAGE] checkpoint stored: {timestamp}")

        return AvailableOfflineSync(available_offline_last_sync=timestamp)

    def delete_available_offline_sync(self) -> bool:
        """Remove the checkpoint (maintenance only)"""
        with self.db_manager.get_session() as session:
            result = session.execute(
                delete(AvailableOfflineSyncTable)
                .where(AvailableOfflineSyncTable.id == AVAILABLE_OFFLINE_SYNC_ROW_ID)
            )
            deleted = result.rowcount > 0

        if deleted:
            logger.info("[STORAGE] checkpoint deleted")
        return deleted

"""
Schedule the periodic job responsible for synchronizing available offline
files, a.k.a. kept-in-sync files, that have been updated locally with the
remote server, and keep the synchronization checkpoint up to date.
"""
from typing import Callable, Optional

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.datamodel.data_models import AvailableOfflineSync, FilesForAccount
from offline_sync.global_const.const_config import (
    AVAILABLE_OFFLINE_JOB_HANDLER,
    MILLISECONDS_INTERVAL_AVAILABLE_OFFLINE,
    JobExtra,
    JobId,
)
from offline_sync.scheduling.job_service import PeriodicJobService, ScheduledTaskDescriptor
from offline_sync.scheduling.platform import supports_periodic_jobs
from offline_sync.scheduling.utils.time_utils import current_time_millis
from offline_sync.utils.loguru_setting import logger


class AvailableOfflineHandler:
    """Bridge between "keep these account files in sync" and the periodic job service"""

    def __init__(
        self,
        account_name: str,
        job_service: Optional[PeriodicJobService] = None,
        storage_manager: Optional[AvailableOfflineSyncStorageManager] = None,
        capability: Callable[[], bool] = supports_periodic_jobs,
        clock: Callable[[], int] = current_time_millis,
    ):
        """
        Args:
            account_name: account the handler acts for
            job_service: periodic job service, required to schedule
            storage_manager: checkpoint store, defaults to the local database
            capability: probe telling whether periodic jobs are available
            clock: wall-clock time in milliseconds
        """
        self.account_name = account_name
        self.job_service = job_service
        self._storage_manager = storage_manager
        self.capability = capability
        self.clock = clock

    @property
    def storage_manager(self) -> AvailableOfflineSyncStorageManager:
        if self._storage_manager is None:
            self._storage_manager = AvailableOfflineSyncStorageManager()
        return self._storage_manager

    def schedule_available_offline_job(self, files_for_account: FilesForAccount) -> None:
        """
        Schedule a periodic job to check whether available offline files
        recently updated need to be uploaded

        Args:
            files_for_account: available offline files of one account
        """
        if not self.capability():
            logger.info("[AVAILABLE_OFFLINE] periodic jobs not supported here, nothing scheduled")
            return

        if self.job_service is None:
            raise RuntimeError("a job service is required to schedule the available offline job")

        logger.debug("[AVAILABLE_OFFLINE] updating synchronization timestamp in database")
        timestamp = self.clock()
        self.storage_manager.store_available_offline_sync(AvailableOfflineSync(timestamp))

        # The job store persists the job, so the files travel as JSON
        extras = {
            JobExtra.AVAILABLE_OFFLINE_SYNC_JOB_ID.value: int(JobId.AVAILABLE_OFFLINE),
            JobExtra.AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT.value: files_for_account.to_json(),
        }
        descriptor = ScheduledTaskDescriptor(
            task_id=JobId.AVAILABLE_OFFLINE,
            interval_ms=MILLISECONDS_INTERVAL_AVAILABLE_OFFLINE,
            persist_across_reboot=True,
            handler=AVAILABLE_OFFLINE_JOB_HANDLER,
            extras=extras,
        )

        logger.debug(
            f"[AVAILABLE_OFFLINE] scheduling available offline job for {files_for_account.account_name} "
            f"({len(files_for_account.files)} files)"
        )
        self.job_service.schedule(descriptor)

    def update_available_offline_last_sync(self, available_offline_last_sync_timestamp: int) -> None:
        """
        Update timestamp (in milliseconds) from which to start checking
        available offline files to synchronize

        Args:
            available_offline_last_sync_timestamp: last synchronized point in time
        """
        if available_offline_last_sync_timestamp < 0:
            raise ValueError(
                f"timestamp must be non-negative, got {available_offline_last_sync_timestamp}"
            )

        available_offline_sync = self.storage_manager.get_available_offline_sync()
        if available_offline_sync is None:
            logger.debug("[AVAILABLE_OFFLINE] no checkpoint yet, last sync not updated")
            return

        available_offline_sync.available_offline_last_sync = int(available_offline_last_sync_timestamp)
        self.storage_manager.update_available_offline_sync(available_offline_sync)

"""
Available offline synchronization job

Run by the job service every interval: rebuilds the files-for-account
payload from the job extras, picks the files modified locally since the last
synchronization and hands them to the registered uploader, then advances the
checkpoint.
"""

import os
import threading
from typing import Any, Callable, Dict, List, Optional

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.datamodel.data_models import FilesForAccount, OfflineFile, PayloadError
from offline_sync.global_const.const_config import JobExtra, JobId
from offline_sync.scheduling.available_offline_handler import AvailableOfflineHandler
from offline_sync.scheduling.utils.time_utils import current_time_millis
from offline_sync.tasks.base_task import BaseTask
from offline_sync.utils.loguru_setting import logger

# uploader(account_name, files) pushes the given local files to the server
FileUploader = Callable[[str, List[OfflineFile]], None]

_FILE_UPLOADER: Optional[FileUploader] = None
_FILE_UPLOADER_LOCK = threading.Lock()


def register_file_uploader(uploader: Optional[FileUploader]) -> None:
    """Register the uploader used by scheduled runs (None unregisters)"""
    global _FILE_UPLOADER
    with _FILE_UPLOADER_LOCK:
        _FILE_UPLOADER = uploader


def get_file_uploader() -> Optional[FileUploader]:
    with _FILE_UPLOADER_LOCK:
        return _FILE_UPLOADER


def select_modified_files(files: List[OfflineFile], since_ms: int) -> List[OfflineFile]:
    """
    Files whose local copy changed after since_ms

    Files without a local copy are skipped: there is nothing to upload yet.
    """
    modified = []
    for offline_file in files:
        if not offline_file.storage_path or not os.path.isfile(offline_file.storage_path):
            continue
        modified_ms = int(os.path.getmtime(offline_file.storage_path) * 1000)
        if modified_ms > since_ms:
            modified.append(offline_file)
    return modified


class AvailableOfflineSyncTask(BaseTask):
    """Upload available offline files updated locally since the last sync"""

    non_retryable_exceptions = (PayloadError,)

    def __init__(
        self,
        extras: Dict[str, Any],
        storage_manager: Optional[AvailableOfflineSyncStorageManager] = None,
        uploader: Optional[FileUploader] = None,
        clock: Callable[[], int] = current_time_millis,
        max_retries: int = 3,
        retry_delay: int = 5,
    ):
        super().__init__("AVAILABLE_OFFLINE_SYNC", max_retries=max_retries, retry_delay=retry_delay)
        self.extras = extras or {}
        self.storage_manager = storage_manager or AvailableOfflineSyncStorageManager()
        self.uploader = uploader
        self.clock = clock

    def _parse_extras(self) -> FilesForAccount:
        job_id = self.extras.get(JobExtra.AVAILABLE_OFFLINE_SYNC_JOB_ID.value)
        if job_id != int(JobId.AVAILABLE_OFFLINE):
            raise PayloadError(f"unexpected job id in extras: {job_id!r}")
        return FilesForAccount.from_json(
            self.extras.get(JobExtra.AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT.value)
        )

    def execute_task(self) -> Dict[str, Any]:
        files_for_account = self._parse_extras()
        account_name = files_for_account.account_name
        run_started = self.clock()

        checkpoint = self.storage_manager.get_available_offline_sync()
        if checkpoint is None:
            logger.warning(f"[{self.task_name}] no synchronization checkpoint, skipping {account_name}")
            return self._create_success_result(account_name=account_name, skipped=True, uploaded=0)

        uploader = self.uploader or get_file_uploader()
        if uploader is None:
            logger.warning(f"[{self.task_name}] no file uploader registered, skipping {account_name}")
            return self._create_success_result(account_name=account_name, skipped=True, uploaded=0)

        modified = select_modified_files(files_for_account.files, checkpoint.available_offline_last_sync)
        logger.info(
            f"[{self.task_name}] {account_name}: {len(modified)}/{len(files_for_account.files)} "
            f"files modified since {checkpoint.available_offline_last_sync}"
        )
        if modified:
            uploader(account_name, modified)

        handler = AvailableOfflineHandler(account_name, storage_manager=self.storage_manager)
        handler.update_available_offline_last_sync(run_started)

        return self._create_success_result(
            account_name=account_name,
            skipped=False,
            checked=len(files_for_account.files),
            uploaded=len(modified),
            last_sync=run_started,
        )


def run_available_offline_sync(extras: Dict[str, Any]) -> Dict[str, Any]:
    """Job entry point referenced by the scheduled job"""
    result = AvailableOfflineSyncTask(extras).run()
    if not result['success']:
        # surface the failure to the scheduler's job events
        raise RuntimeError(f"available offline sync failed: {result['error']}")
    return result

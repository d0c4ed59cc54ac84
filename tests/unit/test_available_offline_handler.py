"""
Unit tests for AvailableOfflineHandler

Tests cover:
- Scheduling: checkpoint written, single fixed-id registration, payload carried as JSON
- Capability gate: nothing scheduled and no checkpoint written
- Last sync update on present / absent checkpoint
- Collaborator failures propagating to the caller
"""

from itertools import count
from unittest.mock import Mock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from offline_sync.datamodel.available_offline_sync_storage import AvailableOfflineSyncStorageManager
from offline_sync.datamodel.data_models import AvailableOfflineSync, FilesForAccount, OfflineFile
from offline_sync.global_const.const_config import (
    AVAILABLE_OFFLINE_JOB_HANDLER,
    MILLISECONDS_INTERVAL_AVAILABLE_OFFLINE,
    JobExtra,
    JobId,
)
from offline_sync.scheduling.available_offline_handler import AvailableOfflineHandler
from offline_sync.scheduling.job_service import PeriodicJobService
from offline_sync.utils.create_table import AvailableOfflineSyncTable

ACCOUNT = "alice@cloud.example.com"


@pytest.fixture
def files_for_account():
    return FilesForAccount(
        ACCOUNT,
        [OfflineFile("/Documents/a.txt", "/tmp/a.txt"), OfflineFile("/Documents/b.txt")],
    )


@pytest.fixture
def clock():
    ticks = count(start=1_000, step=1_000)
    return lambda: next(ticks)


@pytest.fixture
def mock_job_service():
    return Mock(spec=PeriodicJobService)


class TestScheduleAvailableOfflineJob:

    def test_schedule_writes_checkpoint_and_registers_job(
        self, storage_manager, mock_job_service, files_for_account
    ):
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage_manager,
            capability=lambda: True, clock=lambda: 123_456,
        )

        handler.schedule_available_offline_job(files_for_account)

        assert storage_manager.get_available_offline_sync() == AvailableOfflineSync(123_456)
        mock_job_service.schedule.assert_called_once()
        descriptor = mock_job_service.schedule.call_args.args[0]
        assert descriptor.task_id == JobId.AVAILABLE_OFFLINE
        assert descriptor.interval_ms == MILLISECONDS_INTERVAL_AVAILABLE_OFFLINE == 900000
        assert descriptor.persist_across_reboot is True
        assert descriptor.handler == AVAILABLE_OFFLINE_JOB_HANDLER
        assert descriptor.extras[JobExtra.AVAILABLE_OFFLINE_SYNC_JOB_ID.value] == 2

    def test_payload_deserializes_to_original(self, storage_manager, mock_job_service, files_for_account):
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage_manager, capability=lambda: True,
        )

        handler.schedule_available_offline_job(files_for_account)

        extras = mock_job_service.schedule.call_args.args[0].extras
        payload = extras[JobExtra.AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT.value]
        assert isinstance(payload, str)
        assert FilesForAccount.from_json(payload) == files_for_account

    def test_scheduling_twice_keeps_one_job_and_latest_checkpoint(
        self, storage_manager, job_service, files_for_account, clock
    ):
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=job_service, storage_manager=storage_manager,
            capability=lambda: True, clock=clock,
        )

        handler.schedule_available_offline_job(files_for_account)
        handler.schedule_available_offline_job(files_for_account)

        jobs = job_service.get_all_pending_jobs()
        assert [job.id for job in jobs] == ["2"]
        assert storage_manager.get_available_offline_sync().available_offline_last_sync == 2_000

    def test_second_account_replaces_first_registration(self, storage_manager, job_service):
        for account in ("alice", "bob"):
            AvailableOfflineHandler(
                account, job_service=job_service, storage_manager=storage_manager, capability=lambda: True,
            ).schedule_available_offline_job(FilesForAccount(account, [OfflineFile(f"/{account}.txt")]))

        jobs = job_service.get_all_pending_jobs()
        assert len(jobs) == 1
        payload = jobs[0].kwargs["extras"][JobExtra.AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT.value]
        assert FilesForAccount.from_json(payload).account_name == "bob"

    def test_unsupported_platform_is_a_noop(self, storage_manager, mock_job_service, files_for_account):
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage_manager, capability=lambda: False,
        )

        handler.schedule_available_offline_job(files_for_account)

        mock_job_service.schedule.assert_not_called()
        assert storage_manager.get_available_offline_sync() is None

    def test_capability_checked_on_every_call(self, storage_manager, mock_job_service, files_for_account):
        capability = Mock(side_effect=[True, False])
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage_manager, capability=capability,
        )

        handler.schedule_available_offline_job(files_for_account)
        handler.schedule_available_offline_job(files_for_account)

        assert capability.call_count == 2
        assert mock_job_service.schedule.call_count == 1

    def test_missing_job_service_raises(self, storage_manager, files_for_account):
        handler = AvailableOfflineHandler(ACCOUNT, storage_manager=storage_manager, capability=lambda: True)
        with pytest.raises(RuntimeError):
            handler.schedule_available_offline_job(files_for_account)

    def test_job_service_failure_propagates(self, storage_manager, mock_job_service, files_for_account):
        mock_job_service.schedule.side_effect = RuntimeError("scheduler unavailable")
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage_manager, capability=lambda: True,
        )

        with pytest.raises(RuntimeError, match="scheduler unavailable"):
            handler.schedule_available_offline_job(files_for_account)

    def test_storage_failure_propagates_before_scheduling(self, mock_job_service, files_for_account):
        storage = Mock(spec=AvailableOfflineSyncStorageManager)
        storage.store_available_offline_sync.side_effect = OperationalError("UPDATE", {}, Exception("disk I/O error"))
        handler = AvailableOfflineHandler(
            ACCOUNT, job_service=mock_job_service, storage_manager=storage, capability=lambda: True,
        )

        with pytest.raises(OperationalError):
            handler.schedule_available_offline_job(files_for_account)
        mock_job_service.schedule.assert_not_called()


class TestUpdateAvailableOfflineLastSync:

    def test_update_existing_checkpoint(self, storage_manager, engine):
        storage_manager.create_available_offline_sync(1_000)
        with Session(engine) as session:
            created_at = session.scalar(select(AvailableOfflineSyncTable.created_at))

        AvailableOfflineHandler(ACCOUNT, storage_manager=storage_manager).update_available_offline_last_sync(7_777)

        assert storage_manager.get_available_offline_sync() == AvailableOfflineSync(7_777)
        with Session(engine) as session:
            assert session.scalar(select(AvailableOfflineSyncTable.created_at)) == created_at

    def test_update_without_checkpoint_creates_nothing(self, storage_manager):
        AvailableOfflineHandler(ACCOUNT, storage_manager=storage_manager).update_available_offline_last_sync(7_777)

        assert storage_manager.get_available_offline_sync() is None

    def test_update_does_not_need_a_job_service(self, storage_manager):
        storage_manager.create_available_offline_sync(1)
        handler = AvailableOfflineHandler(ACCOUNT, storage_manager=storage_manager, capability=lambda: False)

        handler.update_available_offline_last_sync(0)

        assert storage_manager.get_available_offline_sync().available_offline_last_sync == 0

    def test_negative_timestamp_rejected(self, storage_manager):
        storage_manager.create_available_offline_sync(1)
        with pytest.raises(ValueError):
            AvailableOfflineHandler(ACCOUNT, storage_manager=storage_manager).update_available_offline_last_sync(-1)
        assert storage_manager.get_available_offline_sync().available_offline_last_sync == 1

    def test_default_storage_uses_local_engine(self, local_engine):
        handler = AvailableOfflineHandler(ACCOUNT)
        handler.storage_manager.create_available_offline_sync(3)

        handler.update_available_offline_last_sync(4)

        assert AvailableOfflineSyncStorageManager(local_engine).get_available_offline_sync().available_offline_last_sync == 4

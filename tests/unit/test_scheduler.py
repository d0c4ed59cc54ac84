"""
Unit tests for the SyncScheduler daemon
"""

from unittest.mock import Mock, patch

import pytest

from offline_sync.scheduling.core.scheduler import SyncScheduler


class TestSyncScheduler:

    def test_start_requires_initialize(self, engine):
        with pytest.raises(RuntimeError):
            SyncScheduler(engine).start()

    def test_initialize_and_start(self, engine):
        daemon = SyncScheduler(engine)

        daemon.initialize(register_signals=False)
        daemon.start()
        try:
            assert daemon.job_service.running
        finally:
            daemon.stop()

        assert not daemon.job_service.running

    def test_initialize_retries_then_raises(self, engine):
        daemon = SyncScheduler(engine)

        with patch("offline_sync.scheduling.core.scheduler.DatabaseManager") as manager, \
                patch("offline_sync.scheduling.core.scheduler.time.sleep") as sleep, \
                patch("offline_sync.scheduling.core.scheduler.SchedulerConfig") as config:
            config.MAX_INIT_RETRIES = 2
            config.INIT_RETRY_DELAY = 0
            manager.return_value.check_connection.side_effect = RuntimeError("database unreachable")

            with pytest.raises(RuntimeError):
                daemon.initialize(register_signals=False)

        assert manager.return_value.check_connection.call_count == 2
        sleep.assert_called_once_with(0)
        assert daemon.job_service is None

    def test_main_loop_restarts_stopped_scheduler(self, engine):
        daemon = SyncScheduler(engine)
        daemon.max_failures = 3
        daemon.main_loop_interval = 0
        daemon.job_service = Mock()
        daemon.job_service.running = False

        with patch("offline_sync.scheduling.core.scheduler.time.sleep"):
            daemon._run_main_loop()

        # restarted twice, gave up on the third consecutive failure
        assert daemon.job_service.start.call_count == 2
        assert daemon.consecutive_failures == 3

    def test_main_loop_wakes_running_scheduler(self, engine):
        daemon = SyncScheduler(engine)
        daemon.main_loop_interval = 0
        daemon.consecutive_failures = 1
        daemon.job_service = Mock()
        daemon.job_service.running = True

        def stop_after_one_iteration(_):
            daemon.is_shutting_down = True

        with patch("offline_sync.scheduling.core.scheduler.time.sleep", side_effect=stop_after_one_iteration):
            daemon._run_main_loop()

        daemon.job_service.wakeup.assert_called_once_with()
        daemon.job_service.start.assert_not_called()
        assert daemon.consecutive_failures == 0

    def test_main_loop_error_message_with_braces(self, engine):
        daemon = SyncScheduler(engine)
        daemon.max_failures = 2
        daemon.main_loop_interval = 0
        daemon.job_service = Mock()
        daemon.job_service.running = True
        daemon.job_service.wakeup.side_effect = RuntimeError("bad extras {'payload': 1}")

        with patch("offline_sync.scheduling.core.scheduler.time.sleep"):
            daemon._run_main_loop()

        assert daemon.job_service.wakeup.call_count == 2
        assert daemon.consecutive_failures == 2

    def test_stop_error_message_with_braces(self, engine):
        daemon = SyncScheduler(engine)
        daemon.job_service = Mock()
        daemon.job_service.running = True
        daemon.job_service.shutdown.side_effect = RuntimeError("{executor} busy")

        daemon.stop()

        daemon.job_service.shutdown.assert_called_once_with(wait=True)

"""
Scheduler daemon
"""
import signal
import sys
import time
from typing import NoReturn, Optional

from apscheduler.schedulers import SchedulerAlreadyRunningError

from offline_sync.global_const.global_const import get_local_engine
from offline_sync.scheduling.config.settings import SchedulerConfig
from offline_sync.scheduling.job_service import PeriodicJobService
from offline_sync.tasks.table_tasks import safe_create_tables
from offline_sync.utils.database_utils import DatabaseManager
from offline_sync.utils.loguru_setting import logger


class SyncScheduler:
    """Long running process executing the registered periodic jobs"""

    def __init__(self, engine=None):
        self.engine = engine or get_local_engine()
        self.job_service: Optional[PeriodicJobService] = None
        self.is_shutting_down = False
        self.consecutive_failures = 0

        self.max_failures = SchedulerConfig.MAX_FAILURES
        self.main_loop_interval = SchedulerConfig.MAIN_LOOP_INTERVAL

    def _handle_shutdown(self, signal_num: int, frame) -> NoReturn:
        """Stop the scheduler and exit"""
        if self.is_shutting_down:
            logger.warning("[SCHEDULER] already shutting down")
            return

        self.is_shutting_down = True
        signal_name = signal.Signals(signal_num).name
        logger.info(f"[SCHEDULER] received {signal_name}")

        self.stop()

        logger.info("[SCHEDULER] exiting")
        sys.exit(0)

    def _register_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._handle_shutdown)
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        logger.info("[SCHEDULER] signal handlers registered")

    def _log_registered_jobs(self) -> None:
        jobs = self.job_service.get_all_pending_jobs()
        logger.info(f"[SCHEDULER] {len(jobs)} job(s) registered")
        for job in jobs:
            next_run = getattr(job, "next_run_time", None)
            logger.info(f"  - {job.id} ({job.name}): {next_run.isoformat() if next_run else job.trigger}")

    def _run_main_loop(self) -> None:
        """Keep the scheduler alive, restarting it when it stops unexpectedly"""
        logger.info("[SCHEDULER] entering main loop")

        while not self.is_shutting_down:
            try:
                if not self.job_service.running:
                    self.consecutive_failures += 1
                    logger.error(f"[SCHEDULER] scheduler stopped (failures: {self.consecutive_failures}/{self.max_failures})")

                    if self.consecutive_failures >= self.max_failures:
                        logger.critical("[SCHEDULER] too many consecutive failures, exiting")
                        break

                    self.job_service.start()
                    logger.info("[SCHEDULER] scheduler restarted")
                else:
                    # pick up jobs scheduled or cancelled from the command line
                    self.job_service.wakeup()
                    if self.consecutive_failures > 0:
                        self.consecutive_failures = 0
                        logger.info("[SCHEDULER] scheduler back to normal")

                time.sleep(self.main_loop_interval)

            except SchedulerAlreadyRunningError:
                self.consecutive_failures = 0
                time.sleep(self.main_loop_interval)
            except Exception as e:
                self.consecutive_failures += 1
                logger.opt(exception=True).error(f"[SCHEDULER] main loop error: {e}")

                if self.consecutive_failures >= self.max_failures:
                    logger.critical("[SCHEDULER] too many main loop errors, exiting")
                    break

                time.sleep(self.main_loop_interval)

        logger.info("[SCHEDULER] main loop finished")

    def initialize(self, register_signals: bool = True) -> None:
        """Check the database, create the tables and build the job service"""
        logger.info("[SCHEDULER] initializing...")

        max_init_retries = SchedulerConfig.MAX_INIT_RETRIES
        init_retry_delay = SchedulerConfig.INIT_RETRY_DELAY

        for init_attempt in range(1, max_init_retries + 1):
            try:
                DatabaseManager(self.engine).check_connection()
                logger.info("[SCHEDULER] database connection ok")

                safe_create_tables(self.engine)

                self.job_service = PeriodicJobService(engine=self.engine)

                if register_signals:
                    self._register_signal_handlers()

                logger.info("[SCHEDULER] initialized")
                return

            except Exception as e:
                logger.error(f"[SCHEDULER] initialization failed (attempt {init_attempt}/{max_init_retries}): {e}")

                if init_attempt < max_init_retries:
                    logger.warning(f"[SCHEDULER] retrying in {init_retry_delay}s...")
                    time.sleep(init_retry_delay)
                else:
                    logger.critical(f"[SCHEDULER] initialization failed after {max_init_retries} attempts")
                    raise

    def start(self) -> None:
        """Start executing jobs (non blocking)"""
        if not self.job_service:
            raise RuntimeError("scheduler not initialized, call initialize() first")

        self.job_service.start()
        self._log_registered_jobs()

    def stop(self) -> None:
        if self.job_service and self.job_service.running:
            try:
                self.job_service.shutdown(wait=True)
            except Exception as e:
                logger.opt(exception=True).error(f"[SCHEDULER] failed to stop scheduler: {e}")

    def run(self) -> None:
        """Initialize, start and block in the main loop"""
        logger.info("[SCHEDULER] === offline sync scheduler starting ===")

        try:
            self.initialize()
            self.start()
        except Exception as e:
            logger.critical(f"[SCHEDULER] scheduler cannot start: {e}")
            raise

        try:
            self._run_main_loop()
        except KeyboardInterrupt:
            logger.info("[SCHEDULER] keyboard interrupt")
        finally:
            self.stop()
            logger.info("[SCHEDULER] scheduler finished")


def run_scheduler() -> None:
    """Scheduler entry point"""
    SyncScheduler().run()

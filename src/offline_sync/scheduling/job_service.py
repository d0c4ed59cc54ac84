"""
Periodic job service

Thin layer over an APScheduler BackgroundScheduler exposing
"register or replace a periodic job under a fixed id".

Two job stores are configured:
- persistent: SQLAlchemyJobStore on the local database, jobs survive restarts
- volatile: MemoryJobStore, jobs live as long as the process

Jobs only reference their handler by its textual "module:function" name and
receive their payload as flat extras, so a persisted job can be rebuilt by a
fresh process.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from apscheduler import events
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from offline_sync.global_const.const_config import JobId
from offline_sync.global_const.global_const import get_local_engine
from offline_sync.scheduling.config.settings import SchedulerConfig
from offline_sync.scheduling.utils.time_utils import get_local_timezone
from offline_sync.utils.exception_listener import exception_listener, set_scheduler_instance
from offline_sync.utils.loguru_setting import logger

ExtraValue = Union[str, int]


@dataclass
class ScheduledTaskDescriptor:
    """
    Periodic task registration request

    Attributes:
        task_id: Fixed job id; scheduling the same id again replaces the job
        interval_ms: Period in milliseconds
        persist_across_reboot: Keep the job in the persistent job store
        handler: Textual reference of the function run at every tick
        extras: Flat parameters handed to the handler as ``extras``
    """

    task_id: JobId
    interval_ms: int
    persist_across_reboot: bool
    handler: str
    extras: Dict[str, ExtraValue] = field(default_factory=dict)

    def __post_init__(self):
        self.task_id = JobId(self.task_id)
        if int(self.interval_ms) <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")
        if not isinstance(self.handler, str) or ":" not in self.handler:
            raise ValueError(f"handler must be a 'module:function' reference, got {self.handler!r}")
        for key, value in self.extras.items():
            if not isinstance(key, str):
                raise TypeError(f"extras key must be a string, got {type(key).__name__}")
            # bool is an int subclass but has no place in the extras
            if isinstance(value, bool) or not isinstance(value, (str, int)):
                raise TypeError(f"extras value for {key!r} must be str or int, got {type(value).__name__}")

    @property
    def job_id(self) -> str:
        return str(int(self.task_id))

    @property
    def jobstore(self) -> str:
        if self.persist_across_reboot:
            return SchedulerConfig.PERSISTENT_JOBSTORE
        return SchedulerConfig.VOLATILE_JOBSTORE


def build_scheduler(engine=None) -> BackgroundScheduler:
    """
    Create the APScheduler scheduler with the persistent and volatile job stores

    Args:
        engine: database engine of the persistent job store, defaults to the local engine
    """
    engine = engine or get_local_engine()
    job_stores = {
        SchedulerConfig.PERSISTENT_JOBSTORE: SQLAlchemyJobStore(
            engine=engine,
            tablename=SchedulerConfig.JOBSTORE_TABLE,
        ),
        SchedulerConfig.VOLATILE_JOBSTORE: MemoryJobStore(),
    }
    scheduler = BackgroundScheduler(
        jobstores=job_stores,
        timezone=get_local_timezone(),
        job_defaults=SchedulerConfig.get_job_defaults(),
    )
    scheduler.add_listener(
        exception_listener,
        events.EVENT_JOB_ERROR | events.EVENT_JOB_EXECUTED
    )
    set_scheduler_instance(scheduler)
    logger.info("[JOB_SERVICE] scheduler created (persistent + volatile job stores)")
    return scheduler


class PeriodicJobService:
    """Register, replace and cancel periodic jobs"""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None, engine=None):
        """
        Args:
            scheduler: scheduler to use, built with build_scheduler() when omitted
            engine: database engine for the persistent job store (ignored with scheduler)
        """
        self.scheduler = scheduler or build_scheduler(engine)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self, paused: bool = False) -> None:
        if not self.scheduler.running:
            self.scheduler.start(paused=paused)
            logger.info(f"[JOB_SERVICE] scheduler started{' (paused)' if paused else ''}")

    def shutdown(self, wait: bool = True) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("[JOB_SERVICE] scheduler stopped")

    def wakeup(self) -> None:
        """
        Re-read the job stores now

        The scheduler only looks at its stores when it wakes up, so jobs added
        or removed by another process sharing the persistent store stay unseen
        until the next due run (forever when the store was empty at start).
        """
        if self.scheduler.running:
            self.scheduler.wakeup()

    def _remove_job(self, job_id: str, keep_jobstore: Optional[str] = None) -> int:
        """Remove every registration of job_id outside keep_jobstore"""
        removed = 0
        for alias in (SchedulerConfig.PERSISTENT_JOBSTORE, SchedulerConfig.VOLATILE_JOBSTORE):
            if alias == keep_jobstore:
                continue
            while True:
                try:
                    self.scheduler.remove_job(job_id, jobstore=alias)
                except JobLookupError:
                    break
                removed += 1
        return removed

    def schedule(self, descriptor: ScheduledTaskDescriptor) -> Job:
        """
        Register the periodic job, replacing any job with the same id

        Returns:
            Job: the registered job
        """
        job_id = descriptor.job_id

        # A running scheduler replaces in place within the target store; a
        # stopped one only queues jobs, so drop every queued copy first.
        keep = descriptor.jobstore if self.scheduler.running else None
        removed = self._remove_job(job_id, keep_jobstore=keep)
        if removed:
            logger.debug(f"[JOB_SERVICE] removed {removed} previous registration(s) of job {job_id}")

        job = self.scheduler.add_job(
            func=descriptor.handler,
            trigger=IntervalTrigger(
                seconds=int(descriptor.interval_ms) / 1000.0,
                timezone=self.scheduler.timezone,
            ),
            kwargs={"extras": dict(descriptor.extras)},
            id=job_id,
            name=descriptor.task_id.name,
            jobstore=descriptor.jobstore,
            replace_existing=True,
        )
        logger.info(
            f"[JOB_SERVICE] job {job_id} ({descriptor.task_id.name}) scheduled every "
            f"{descriptor.interval_ms} ms in '{descriptor.jobstore}' store"
        )
        return job

    def cancel(self, task_id: JobId) -> bool:
        """Remove the job; returns False if it was not scheduled"""
        removed = self._remove_job(str(int(task_id)))
        if removed:
            logger.info(f"[JOB_SERVICE] job {int(task_id)} cancelled")
        return removed > 0

    def get_pending_job(self, task_id: JobId) -> Optional[Job]:
        return self.scheduler.get_job(str(int(task_id)))

    def get_all_pending_jobs(self) -> List[Job]:
        return self.scheduler.get_jobs()

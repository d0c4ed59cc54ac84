"""
Job execution status tracking for the APScheduler job service

1. records success/error of every executed job
2. thread-safe status table queried by the CLI and the scheduler daemon
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger
from typing_extensions import TypedDict


class JobStatus(TypedDict):
    """Last known execution status of a job"""
    status: str  # success/error
    last_execution: datetime
    exception: Optional[str]


_JOB_STATUS: Dict[str, JobStatus] = {}
_JOB_STATUS_LOCK: threading.Lock = threading.Lock()

_SCHEDULER_INSTANCE: Optional[Any] = None
_SCHEDULER_LOCK: threading.Lock = threading.Lock()


def set_scheduler_instance(scheduler: Any) -> None:
    """Register the scheduler instance being tracked

    Args:
        scheduler: APScheduler scheduler (BackgroundScheduler)
    """
    global _SCHEDULER_INSTANCE
    with _SCHEDULER_LOCK:
        _SCHEDULER_INSTANCE = scheduler
        logger.debug("[JOB_STATUS] scheduler instance registered")


def get_scheduler_instance() -> Optional[Any]:
    """Registered scheduler instance, None if not registered"""
    with _SCHEDULER_LOCK:
        return _SCHEDULER_INSTANCE


def update_job_status(job_id: str, status: str, exception: Optional[str] = None) -> None:
    """Record the outcome of one job execution"""
    with _JOB_STATUS_LOCK:
        _JOB_STATUS[job_id] = JobStatus(
            status=status,
            last_execution=datetime.now(timezone.utc),
            exception=exception,
        )


def get_job_status(job_id: str) -> Optional[JobStatus]:
    """Copy of the status of one job"""
    with _JOB_STATUS_LOCK:
        status = _JOB_STATUS.get(job_id)
        return JobStatus(**status) if status is not None else None


def get_job_status_copy() -> Dict[str, JobStatus]:
    """Copy of the whole status table"""
    with _JOB_STATUS_LOCK:
        return {job_id: JobStatus(**status) for job_id, status in _JOB_STATUS.items()}


def clear_job_status() -> None:
    with _JOB_STATUS_LOCK:
        _JOB_STATUS.clear()


def exception_listener(event: Any) -> None:
    """APScheduler listener for EVENT_JOB_EXECUTED | EVENT_JOB_ERROR

    Args:
        event: APScheduler job event (job_id, exception)
    """
    job_id = getattr(event, "job_id", None)
    if not job_id:
        logger.warning("[JOB_STATUS] job event without job_id ignored")
        return

    if getattr(event, "exception", None):
        exception_str = str(event.exception)
        logger.warning(f"[JOB_STATUS] job {job_id} failed: {exception_str}")
        update_job_status(job_id, "error", exception_str)
    else:
        update_job_status(job_id, "success")

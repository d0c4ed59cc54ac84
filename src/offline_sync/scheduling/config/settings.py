"""
Scheduler configuration
"""
from typing import Dict, Any

from offline_sync.global_const.global_const import settings

class SchedulerConfig:
    """Scheduler configuration"""

    # job defaults
    MISFIRE_GRACE_TIME = int(settings.get("scheduler.misfire_grace_time", 300))
    MAX_JOB_INSTANCES = 1
    COALESCE = True
    REPLACE_EXISTING = True

    # job stores
    PERSISTENT_JOBSTORE = "persistent"
    VOLATILE_JOBSTORE = "volatile"
    JOBSTORE_TABLE = settings.get("scheduler.jobstore_table", "scheduled_jobs")

    # daemon loop
    MAIN_LOOP_INTERVAL = int(settings.get("scheduler.main_loop_interval", 5))
    MAX_FAILURES = int(settings.get("scheduler.max_failures", 3))
    MAX_INIT_RETRIES = int(settings.get("scheduler.max_init_retries", 5))
    INIT_RETRY_DELAY = int(settings.get("scheduler.init_retry_delay", 10))

    @classmethod
    def get_job_defaults(cls) -> Dict[str, Any]:
        """Job defaults for the scheduler"""
        return {
            "misfire_grace_time": cls.MISFIRE_GRACE_TIME,
            "max_instances": cls.MAX_JOB_INSTANCES,
            "coalesce": cls.COALESCE,
        }

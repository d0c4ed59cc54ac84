"""
Scheduling

- available_offline_handler: schedules the available offline job, updates the checkpoint
- job_service: periodic job registration on top of APScheduler
- core.scheduler: scheduler daemon
"""

from .available_offline_handler import AvailableOfflineHandler
from .job_service import PeriodicJobService, ScheduledTaskDescriptor

__all__ = [
    'AvailableOfflineHandler',
    'PeriodicJobService',
    'ScheduledTaskDescriptor',
]
